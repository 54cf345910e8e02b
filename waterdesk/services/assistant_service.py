from __future__ import annotations

import logging

from waterdesk.constants import format_date, format_period
from waterdesk.exceptions import OracleFailure
from waterdesk.models import format_php
from waterdesk.models.bill import Bill
from waterdesk.models.customer import AccountProfile
from waterdesk.oracle.base import TextOracle

logger = logging.getLogger(__name__)

EXPLANATION_FALLBACK = (
    "Sorry, I couldn't generate an explanation right now. "
    "The detailed breakdown is available on the full invoice."
)
TIPS_FALLBACK = "Sorry, couldn't fetch tips right now. Try checking online for general water conservation advice!"


class AssistantService:
    """One-shot oracle prompts outside the conversation: bill explanations and tips."""

    def __init__(self, oracle: TextOracle) -> None:
        self.oracle = oracle

    @staticmethod
    def bill_prompt(bill: Bill, profile: AccountProfile) -> str:
        if bill.charges is None or bill.amount is None:
            raise ValueError("Bill must be priced before it can be explained")
        charges = bill.charges
        return f"""Explain this water bill to a customer named {profile.greeting_name}.
Be friendly, clear, and encouraging. Use markdown for formatting like **bolding**.

Bill Details:
- Bill Period: {format_period(bill.billing_period)}
- Total Amount Due: **{format_php(bill.amount)}**
- Due Date: {format_date(bill.due_date)}
- Water Consumption: **{bill.consumption} cubic meters**

Explain the breakdown clearly:
1. **Basic Charge ({format_php(charges.basic_charge)})**: the main cost for the {bill.consumption} cubic meters used, based on the '{profile.service_type}' tariff rate.
2. **Other Charges**: briefly explain what these are for.
   - FCDA ({format_php(charges.fcda)}): a small adjustment for foreign currency costs.
   - Environmental Charge ({format_php(charges.environmental_charge)}): funds wastewater treatment.
   - Sewerage Charge ({format_php(charges.sewerage_charge)}): applies to commercial service types only.
   - Maintenance Service Charge ({format_php(charges.maintenance_service_charge)}): a fixed fee for meter upkeep.
3. **Taxes ({format_php(charges.government_taxes + charges.vat)})**: government taxes and Value Added Tax.
4. **Previous Unpaid Balance**: mention if there is a previous balance of {format_php(bill.previous_unpaid_amount)}.
5. **Senior Citizen Discount**: mention if a discount of {format_php(bill.senior_citizen_discount)} was applied.

Conclude by summarizing how all these add up to the Total Amount Due and gently remind them of the due date."""

    def explain_bill(self, bill: Bill, profile: AccountProfile) -> str:
        prompt = self.bill_prompt(bill, profile)
        try:
            return self.oracle.generate(prompt)
        except OracleFailure as e:
            logger.warning("Bill explanation failed for bill %s: %s", bill.id, e)
            return EXPLANATION_FALLBACK

    @staticmethod
    def tips_prompt(profile: AccountProfile) -> str:
        if profile.service_address:
            area = f"for a household in {profile.service_address.split(',')[-1].strip()}"
        else:
            area = "for a household"
        return (
            f"Provide 5 concise, actionable, and practical water saving tips for a "
            f"{profile.service_type or 'Residential'} customer in the Philippines {area}. "
            "Format them as a numbered list, each tip on a new line. Make them easy to understand."
        )

    def water_saving_tips(self, profile: AccountProfile) -> str:
        try:
            return self.oracle.generate(self.tips_prompt(profile))
        except OracleFailure as e:
            logger.warning("Water saving tips failed for account %s: %s", profile.account_number, e)
            return TIPS_FALLBACK
