from unittest.mock import MagicMock

import pytest

from waterdesk.exceptions import OracleRequestError
from waterdesk.models.tariff import SystemSettings
from waterdesk.services.assistant_service import EXPLANATION_FALLBACK, TIPS_FALLBACK, AssistantService
from waterdesk.services.ledger_service import BillLedger


class TestExplainBill:
    def setup_method(self):
        self.oracle = MagicMock()
        self.service = AssistantService(self.oracle)

    def _priced(self, stub_calculator, sample_bill, sample_profile):
        ledger = BillLedger(MagicMock(), stub_calculator, SystemSettings())
        return ledger.derive_amount(sample_bill(id=1, previous_unpaid_amount=5000), sample_profile())

    def test_prompt_contains_breakdown(self, stub_calculator, sample_bill, sample_profile):
        bill = self._priced(stub_calculator, sample_bill, sample_profile)
        prompt = AssistantService.bill_prompt(bill, sample_profile())
        assert "customer named Maria Santos" in prompt
        assert "Bill Period: October 2025" in prompt
        assert "**₱257.20**" in prompt
        assert "Basic Charge (₱150.00)" in prompt
        assert "previous balance of ₱50.00" in prompt
        assert "Due Date: Oct 20, 2025" in prompt

    def test_returns_oracle_text(self, stub_calculator, sample_bill, sample_profile):
        self.oracle.generate.return_value = "Your bill is **₱257.20**."
        bill = self._priced(stub_calculator, sample_bill, sample_profile)
        assert self.service.explain_bill(bill, sample_profile()) == "Your bill is **₱257.20**."

    def test_fallback_on_failure(self, stub_calculator, sample_bill, sample_profile):
        self.oracle.generate.side_effect = OracleRequestError("down")
        bill = self._priced(stub_calculator, sample_bill, sample_profile)
        assert self.service.explain_bill(bill, sample_profile()) == EXPLANATION_FALLBACK

    def test_unpriced_bill_rejected(self, sample_bill, sample_profile):
        with pytest.raises(ValueError):
            self.service.explain_bill(sample_bill(id=1), sample_profile())
        self.oracle.generate.assert_not_called()


class TestWaterSavingTips:
    def setup_method(self):
        self.oracle = MagicMock()
        self.service = AssistantService(self.oracle)

    def test_prompt_uses_last_address_part(self, sample_profile):
        prompt = AssistantService.tips_prompt(sample_profile())
        assert "Residential customer in the Philippines for a household in Quezon City" in prompt

    def test_prompt_without_address(self, sample_profile):
        prompt = AssistantService.tips_prompt(sample_profile(service_address=""))
        assert "in the Philippines for a household." in prompt

    def test_returns_oracle_text(self, sample_profile):
        self.oracle.generate.return_value = "1. Fix leaks"
        assert self.service.water_saving_tips(sample_profile()) == "1. Fix leaks"

    def test_fallback_on_failure(self, sample_profile):
        self.oracle.generate.side_effect = OracleRequestError("down")
        assert self.service.water_saving_tips(sample_profile()) == TIPS_FALLBACK
