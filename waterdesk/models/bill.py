from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from waterdesk.constants import MANILA_TZ
from waterdesk.models.tariff import ChargeBreakdown


class BillStatus(str, Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"


class PaymentMethod(str, Enum):
    CARD = "Card"
    BANK_TRANSFER = "Bank Transfer"
    GCASH = "GCash"
    MAYA = "Maya"


def _as_manila(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=MANILA_TZ)
    return value


class PaymentDetails(BaseModel):
    payment_date: datetime
    amount_paid: int = Field(ge=0)  # centavos
    payment_method: PaymentMethod
    payment_reference: str = Field(min_length=1)

    @field_validator("payment_date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return _as_manila(value)


class Bill(BaseModel):
    id: int | None = None
    uuid: str = ""
    customer_id: int
    billing_period: str  # 'YYYY-MM'
    consumption: float = Field(default=0, ge=0)  # cubic meters
    bill_date: datetime
    due_date: datetime
    previous_unpaid_amount: int = Field(default=0, ge=0)  # centavos
    senior_citizen_discount: int = Field(default=0, ge=0)  # centavos
    status: BillStatus = BillStatus.UNPAID
    payment_date: datetime | None = None
    amount_paid: int | None = None
    payment_method: PaymentMethod | None = None
    payment_reference: str | None = None
    created_at: datetime | None = None

    # Derived by BillLedger.derive_amount, never persisted.
    charges: ChargeBreakdown | None = None
    amount: int | None = None
    discount_clamped: bool = False

    @field_validator("bill_date", "due_date", "payment_date", "created_at")
    @classmethod
    def normalize_dates(cls, value: datetime | None) -> datetime | None:
        return _as_manila(value)

    @model_validator(mode="after")
    def check_due_after_bill_date(self) -> Bill:
        if self.due_date < self.bill_date:
            raise ValueError("due_date must not be earlier than bill_date")
        return self

    @property
    def is_paid(self) -> bool:
        return self.status == BillStatus.PAID

    @property
    def is_overdue(self) -> bool:
        if self.is_paid:
            return False
        return datetime.now(MANILA_TZ) > self.due_date

    @property
    def payment_status(self) -> str:
        if self.is_paid:
            return "paid"
        if self.is_overdue:
            return "overdue"
        return "pending"
