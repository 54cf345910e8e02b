from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum

from ulid import ULID

from waterdesk.constants import MANILA_TZ
from waterdesk.exceptions import AlreadyPaid, DataUnavailable, LedgerError, ValidationRejected
from waterdesk.models.bill import Bill, PaymentDetails, PaymentMethod
from waterdesk.models.payment import PaymentIntent
from waterdesk.services.ledger_service import BillLedger

logger = logging.getLogger(__name__)


class PaymentState(str, Enum):
    SELECTING_METHOD = "selecting_method"
    SUBMITTING = "submitting"
    SETTLED = "settled"
    FAILED = "failed"
    CLOSED = "closed"


def generate_reference(method: PaymentMethod) -> str:
    """'GCASH-01JB3...' : method tag plus a ULID, unique per submission."""
    return f"{method.name}-{ULID()}"


class PaymentConfirmationFlow:
    """Collects a payment method for one bill and settles it against the ledger.

    The amount is captured from the bill when the flow starts and cannot be
    changed afterwards.
    """

    def __init__(self, ledger: BillLedger, bill: Bill) -> None:
        if bill.id is None:
            raise ValueError("Cannot pay a bill without an id")
        if bill.is_paid:
            raise AlreadyPaid(bill.id)
        if bill.amount is None:
            raise ValidationRejected("Bill amount has not been calculated")
        self.ledger = ledger
        self.billing_period = bill.billing_period
        self.intent: PaymentIntent | None = PaymentIntent(bill_id=bill.id, amount=bill.amount)
        self.state = PaymentState.SELECTING_METHOD
        self.error = ""
        self.settled_bill: Bill | None = None
        logger.debug("Payment flow opened for bill %s amount=%d", bill.id, bill.amount)

    def _require_intent(self) -> PaymentIntent:
        if self.intent is None:
            raise ValidationRejected("Payment flow is closed")
        return self.intent

    @property
    def amount(self) -> int:
        return self._require_intent().amount

    @property
    def selected_method(self) -> PaymentMethod | None:
        return self._require_intent().selected_method

    def select_method(self, method: PaymentMethod | str) -> None:
        intent = self._require_intent()
        if self.state != PaymentState.SELECTING_METHOD:
            raise ValidationRejected(f"Cannot change payment method while {self.state.value}")
        try:
            intent.selected_method = PaymentMethod(method)
        except ValueError as e:
            raise ValidationRejected(f"Unsupported payment method: {method}") from e

    def submit(self) -> Bill:
        """Record the payment. Raises the ledger's error after moving to FAILED.

        ``AlreadyPaid`` and ``NotFound`` also close the flow. ``DataUnavailable``
        and unexpected errors leave it open for ``retry()``; a repeated
        ``mark_paid`` on an applied payment fails as ``AlreadyPaid``.
        """
        intent = self._require_intent()
        if self.state == PaymentState.SUBMITTING:
            raise ValidationRejected("A payment is already being submitted")
        if self.state != PaymentState.SELECTING_METHOD:
            raise ValidationRejected(f"Cannot submit a payment while {self.state.value}")
        if intent.selected_method is None:
            raise ValidationRejected("Please select a payment method.")

        self.state = PaymentState.SUBMITTING
        self.error = ""
        intent.reference = generate_reference(intent.selected_method)
        payment = PaymentDetails(
            payment_date=datetime.now(MANILA_TZ),
            amount_paid=intent.amount,
            payment_method=intent.selected_method,
            payment_reference=intent.reference,
        )
        try:
            bill = self.ledger.record_payment(intent.bill_id, payment)
        except LedgerError as e:
            self.state = PaymentState.FAILED
            self.error = str(e)
            self.close()
            raise
        except DataUnavailable as e:
            self.state = PaymentState.FAILED
            self.error = str(e)
            logger.warning("Payment for bill %s failed, retry allowed: %s", intent.bill_id, e)
            raise
        except Exception:
            self.state = PaymentState.FAILED
            self.error = "Could not confirm the payment. Please try again."
            logger.error("Unexpected error recording payment for bill %s", intent.bill_id, exc_info=True)
            raise

        self.state = PaymentState.SETTLED
        self.settled_bill = bill
        return bill

    def retry(self) -> None:
        """Go back to method selection after a failure; method and amount are kept."""
        intent = self._require_intent()
        if self.state != PaymentState.FAILED:
            raise ValidationRejected(f"Nothing to retry while {self.state.value}")
        intent.reference = None
        self.state = PaymentState.SELECTING_METHOD

    def close(self) -> None:
        if self.intent is not None:
            logger.debug("Payment flow closed for bill %s in state %s", self.intent.bill_id, self.state.value)
        self.intent = None
        self.state = PaymentState.CLOSED
