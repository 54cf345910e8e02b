from datetime import datetime
from unittest.mock import MagicMock, patch

from waterdesk.constants import MANILA_TZ
from waterdesk.exceptions import AlreadyPaid, DataUnavailable
from waterdesk.models.bill import Bill, BillStatus
from waterdesk.models.customer import AccountProfile
from waterdesk.models.tariff import ChargeBreakdown
from waterdesk.services.ledger_service import PricedBills

PROFILE = AccountProfile(id=1, account_number="AGWA-1", display_name="Maria Santos")
CHARGES = ChargeBreakdown(
    basic_charge=15000,
    fcda=500,
    environmental_charge=1000,
    maintenance_service_charge=2000,
    vat=2220,
    total_calculated_charges=20720,
)


def _bill(**overrides) -> Bill:
    defaults = dict(
        id=1,
        customer_id=1,
        billing_period="2025-10",
        consumption=10,
        bill_date=datetime(2025, 10, 5, tzinfo=MANILA_TZ),
        due_date=datetime(2025, 10, 20, tzinfo=MANILA_TZ),
        previous_unpaid_amount=5000,
        charges=CHARGES,
        amount=25720,
    )
    defaults.update(overrides)
    return Bill(**defaults)


class TestBillLabel:
    def test_label(self):
        from waterdesk.cli.bill_menu import _bill_label

        assert _bill_label(_bill(status=BillStatus.PAID)) == "October 2025 - ₱257.20 - Paid"


class TestDashboardMenu:
    def test_shows_balance(self):
        from waterdesk.cli.bill_menu import dashboard_menu

        ledger = MagicMock()
        ledger.list_bills.return_value = [_bill()]
        ledger.price_bills.return_value = PricedBills(bills=[_bill()])

        overview = dashboard_menu(PROFILE, ledger)
        assert overview.current_balance == 25720

    def test_store_error_shown(self):
        from waterdesk.cli.bill_menu import dashboard_menu

        ledger = MagicMock()
        ledger.list_bills.side_effect = DataUnavailable("Could not fetch your bills. Please try again later.")

        overview = dashboard_menu(PROFILE, ledger)
        assert overview.error == "Could not fetch your bills. Please try again later."
        assert overview.current_balance == 0


class TestPayBillMenu:
    @patch("waterdesk.cli.bill_menu.questionary")
    def test_successful_payment(self, mock_q):
        from waterdesk.cli.bill_menu import pay_bill_menu

        ledger = MagicMock()
        ledger.record_payment.return_value = _bill(status=BillStatus.PAID, payment_reference="GCASH-1")
        mock_q.select.return_value.ask.return_value = "GCash"
        mock_q.confirm.return_value.ask.return_value = True

        paid = pay_bill_menu(_bill(), ledger)
        assert paid.is_paid
        payment = ledger.record_payment.call_args.args[1]
        assert payment.amount_paid == 25720

    @patch("waterdesk.cli.bill_menu.questionary")
    def test_cancel(self, mock_q):
        from waterdesk.cli.bill_menu import pay_bill_menu

        ledger = MagicMock()
        mock_q.select.return_value.ask.return_value = "Cancel"
        assert pay_bill_menu(_bill(), ledger) is None
        ledger.record_payment.assert_not_called()

    @patch("waterdesk.cli.bill_menu.questionary")
    def test_declined_confirmation(self, mock_q):
        from waterdesk.cli.bill_menu import pay_bill_menu

        ledger = MagicMock()
        mock_q.select.return_value.ask.return_value = "Card"
        mock_q.confirm.return_value.ask.return_value = False
        assert pay_bill_menu(_bill(), ledger) is None
        ledger.record_payment.assert_not_called()

    @patch("waterdesk.cli.bill_menu.questionary")
    def test_already_paid_bill(self, mock_q):
        from waterdesk.cli.bill_menu import pay_bill_menu

        assert pay_bill_menu(_bill(status=BillStatus.PAID), MagicMock()) is None
        mock_q.select.assert_not_called()

    @patch("waterdesk.cli.bill_menu.questionary")
    def test_paid_elsewhere(self, mock_q):
        from waterdesk.cli.bill_menu import pay_bill_menu

        ledger = MagicMock()
        ledger.record_payment.side_effect = AlreadyPaid(1)
        mock_q.select.return_value.ask.return_value = "Maya"
        mock_q.confirm.return_value.ask.return_value = True
        assert pay_bill_menu(_bill(), ledger) is None

    @patch("waterdesk.cli.bill_menu.questionary")
    def test_retry_after_store_failure(self, mock_q):
        from waterdesk.cli.bill_menu import pay_bill_menu

        ledger = MagicMock()
        ledger.record_payment.side_effect = [
            DataUnavailable("Could not record payment. Please try again later."),
            _bill(status=BillStatus.PAID, payment_reference="MAYA-2"),
        ]
        mock_q.select.return_value.ask.return_value = "Maya"
        mock_q.confirm.return_value.ask.return_value = True

        paid = pay_bill_menu(_bill(), ledger)
        assert paid.is_paid
        assert ledger.record_payment.call_count == 2

    @patch("waterdesk.cli.bill_menu.questionary")
    def test_give_up_after_store_failure(self, mock_q):
        from waterdesk.cli.bill_menu import pay_bill_menu

        ledger = MagicMock()
        ledger.record_payment.side_effect = DataUnavailable("down")
        mock_q.select.return_value.ask.return_value = "Card"
        mock_q.confirm.return_value.ask.side_effect = [True, False]
        assert pay_bill_menu(_bill(), ledger) is None
        assert ledger.record_payment.call_count == 1


class TestListBillsMenu:
    @patch("waterdesk.cli.bill_menu.questionary")
    def test_empty_list(self, mock_q):
        from waterdesk.cli.bill_menu import list_bills_menu

        ledger = MagicMock()
        ledger.list_bills.return_value = []
        ledger.price_bills.return_value = PricedBills()
        list_bills_menu(PROFILE, ledger, MagicMock())
        mock_q.select.assert_not_called()

    @patch("waterdesk.cli.bill_menu.questionary")
    def test_store_error(self, mock_q):
        from waterdesk.cli.bill_menu import list_bills_menu

        ledger = MagicMock()
        ledger.list_bills.side_effect = DataUnavailable("down")
        list_bills_menu(PROFILE, ledger, MagicMock())
        mock_q.select.assert_not_called()

    @patch("waterdesk.cli.bill_menu.questionary")
    def test_select_back(self, mock_q):
        from waterdesk.cli.bill_menu import list_bills_menu

        ledger = MagicMock()
        ledger.list_bills.return_value = [_bill()]
        ledger.price_bills.return_value = PricedBills(bills=[_bill()], errors=["The bill for 2025-09 could not be calculated and is hidden."])
        mock_q.select.return_value.ask.return_value = "Back"
        list_bills_menu(PROFILE, ledger, MagicMock())

    @patch("waterdesk.cli.bill_menu.questionary")
    def test_select_bill_then_explain(self, mock_q):
        from waterdesk.cli.bill_menu import list_bills_menu

        ledger = MagicMock()
        ledger.list_bills.return_value = [_bill()]
        ledger.price_bills.return_value = PricedBills(bills=[_bill()])
        assistant_service = MagicMock()
        assistant_service.explain_bill.return_value = "Your bill explained."
        mock_q.select.return_value.ask.side_effect = [_bill(), "Explain Bill", "Back", "Back"]

        list_bills_menu(PROFILE, ledger, assistant_service)
        assistant_service.explain_bill.assert_called_once()

    @patch("waterdesk.cli.bill_menu.pay_bill_menu")
    @patch("waterdesk.cli.bill_menu.questionary")
    def test_select_bill_then_pay(self, mock_q, mock_pay):
        from waterdesk.cli.bill_menu import list_bills_menu

        ledger = MagicMock()
        ledger.list_bills.return_value = [_bill()]
        ledger.price_bills.return_value = PricedBills(bills=[_bill()])
        mock_pay.return_value = _bill(status=BillStatus.PAID)
        mock_q.select.return_value.ask.side_effect = [_bill(), "Pay Bill", "Back"]

        list_bills_menu(PROFILE, ledger, MagicMock())
        mock_pay.assert_called_once()
        assert ledger.list_bills.call_count == 2

    @patch("waterdesk.cli.bill_menu.pay_bill_menu")
    @patch("waterdesk.cli.bill_menu.questionary")
    def test_failed_reload_keeps_last_bills(self, mock_q, mock_pay):
        from waterdesk.cli.bill_menu import list_bills_menu

        bill = _bill()
        ledger = MagicMock()
        ledger.list_bills.side_effect = [[bill], DataUnavailable("Could not fetch your bills.")]
        ledger.price_bills.return_value = PricedBills(bills=[bill])
        mock_pay.return_value = _bill(status=BillStatus.PAID)
        mock_q.select.return_value.ask.side_effect = [bill, "Pay Bill", "Back"]

        list_bills_menu(PROFILE, ledger, MagicMock())

        assert ledger.list_bills.call_count == 2
        assert mock_q.select.call_count == 3
        offered = [c.kwargs["value"] for c in mock_q.Choice.call_args_list]
        assert offered == [bill, bill]

    @patch("waterdesk.cli.bill_menu.questionary.select")
    def test_identical_labels_stay_separate(self, mock_select):
        from waterdesk.cli.bill_menu import _bill_label, list_bills_menu

        first = _bill(id=1)
        second = _bill(id=2)
        assert _bill_label(first) == _bill_label(second)
        ledger = MagicMock()
        ledger.list_bills.return_value = [first, second]
        ledger.price_bills.return_value = PricedBills(bills=[first, second])
        mock_select.return_value.ask.return_value = "Back"

        list_bills_menu(PROFILE, ledger, MagicMock())

        choices = mock_select.call_args.kwargs["choices"]
        assert [c.value.id for c in choices[:-1]] == [1, 2]
        assert choices[-1] == "Back"
