from __future__ import annotations

import logging
from datetime import datetime

from pydantic import BaseModel

from waterdesk.exceptions import DataUnavailable, LedgerError, ReconciliationError, TariffError
from waterdesk.models.bill import Bill, PaymentDetails
from waterdesk.models.customer import AccountProfile
from waterdesk.models.tariff import SystemSettings
from waterdesk.repositories.base import BillRepository
from waterdesk.settings import settings
from waterdesk.tariff.base import TariffCalculator
from waterdesk.tariff.schedule import TieredTariffCalculator

logger = logging.getLogger(__name__)


class PricedBills(BaseModel):
    bills: list[Bill] = []
    errors: list[str] = []


def _oldest_unpaid(bills: list[Bill]) -> Bill | None:
    unpaid = [b for b in bills if not b.is_paid and b.amount is not None]
    if not unpaid:
        return None
    return min(unpaid, key=lambda b: b.due_date)


def current_balance(bills: list[Bill]) -> int:
    """Amount due on the unpaid bill with the earliest due date, else 0."""
    bill = _oldest_unpaid(bills)
    return bill.amount if bill is not None and bill.amount is not None else 0


def next_due_date(bills: list[Bill]) -> datetime | None:
    bill = _oldest_unpaid(bills)
    return bill.due_date if bill is not None else None


class BillLedger:
    def __init__(
        self,
        bill_repo: BillRepository,
        calculator: TariffCalculator | None = None,
        system_settings: SystemSettings | None = None,
    ) -> None:
        self.bill_repo = bill_repo
        self.calculator = calculator or TieredTariffCalculator()
        self.system_settings = system_settings or settings.system_settings()

    def list_bills(self, customer_id: int) -> list[Bill]:
        """Bills for a customer, newest ``bill_date`` first. Raises ``DataUnavailable``."""
        bills = self.bill_repo.list_by_customer(customer_id)
        bills.sort(key=lambda b: b.bill_date, reverse=True)
        logger.debug("Listed %d bills for customer=%s", len(bills), customer_id)
        return bills

    def derive_amount(self, bill: Bill, profile: AccountProfile) -> Bill:
        """Return a copy of ``bill`` with ``charges`` and ``amount`` attached.

        Raises ``TariffError`` when the calculator fails and
        ``ReconciliationError`` when its breakdown does not add up or is
        negative. A bill is never priced at a silent zero.
        """
        try:
            charges = self.calculator.calculate(
                bill.consumption,
                profile.service_type,
                profile.meter_size,
                self.system_settings,
            )
        except TariffError:
            raise
        except Exception as e:
            raise TariffError(f"Tariff calculation failed for bill {bill.id}: {e}") from e

        negative = [name for name, value in charges.components.items() if value < 0]
        if negative or charges.total_calculated_charges < 0:
            raise ReconciliationError(f"Bill {bill.id} has negative charges: {', '.join(negative) or 'total'}")
        if not charges.is_reconciled():
            raise ReconciliationError(
                f"Bill {bill.id} charges do not reconcile: itemized {charges.itemized_total} "
                f"!= total {charges.total_calculated_charges}"
            )

        discount = bill.senior_citizen_discount
        clamped = False
        if discount > charges.total_calculated_charges:
            logger.warning(
                "Data quality: bill %s senior citizen discount %d exceeds current charges %d, clamping",
                bill.id,
                discount,
                charges.total_calculated_charges,
            )
            discount = charges.total_calculated_charges
            clamped = True

        amount = charges.total_calculated_charges + bill.previous_unpaid_amount - discount
        return bill.model_copy(update={"charges": charges, "amount": amount, "discount_clamped": clamped})

    def price_bills(self, bills: list[Bill], profile: AccountProfile) -> PricedBills:
        """Derive amounts for every bill; bills that fail are left out and reported."""
        result = PricedBills()
        for bill in bills:
            try:
                result.bills.append(self.derive_amount(bill, profile))
            except TariffError as e:
                logger.error("Excluding bill %s (%s) from display: %s", bill.id, bill.billing_period, e)
                result.errors.append(f"The bill for {bill.billing_period} could not be calculated and is hidden.")
        return result

    def record_payment(self, bill_id: int, payment: PaymentDetails) -> Bill:
        """Mark an Unpaid bill as Paid. Raises ``AlreadyPaid``, ``NotFound`` or ``DataUnavailable``."""
        try:
            bill = self.bill_repo.mark_paid(bill_id, payment)
        except LedgerError as e:
            logger.warning("Payment rejected for bill %s: %s", bill_id, e)
            raise
        logger.info(
            "Bill %s paid: amount=%d method=%s reference=%s",
            bill_id,
            payment.amount_paid,
            payment.payment_method.value,
            payment.payment_reference,
        )
        return bill


class AccountOverview:
    """Dashboard projection of one customer's bills.

    A failed refresh keeps the previously loaded bills and sets ``error``.
    """

    RECENT_LIMIT = 3

    def __init__(self, ledger: BillLedger, profile: AccountProfile) -> None:
        if profile.id is None:
            raise ValueError("Cannot build an overview for a profile without an id")
        self.ledger = ledger
        self.profile = profile
        self.bills: list[Bill] = []
        self.pricing_errors: list[str] = []
        self.error = ""

    def refresh(self) -> bool:
        try:
            raw = self.ledger.list_bills(self.profile.id)
        except DataUnavailable as e:
            logger.warning("Keeping %d stale bills for customer=%s: %s", len(self.bills), self.profile.id, e)
            self.error = str(e)
            return False
        priced = self.ledger.price_bills(raw, self.profile)
        self.bills = priced.bills
        self.pricing_errors = priced.errors
        self.error = ""
        return True

    @property
    def recent_bills(self) -> list[Bill]:
        return self.bills[: self.RECENT_LIMIT]

    @property
    def unpaid_bills(self) -> list[Bill]:
        return [b for b in self.bills if not b.is_paid]

    @property
    def current_balance(self) -> int:
        return current_balance(self.bills)

    @property
    def next_due_date(self) -> datetime | None:
        return next_due_date(self.bills)
