from __future__ import annotations

from pydantic import BaseModel, Field

from waterdesk.models.bill import PaymentMethod


class PaymentIntent(BaseModel):
    """Lives for one payment confirmation flow; amount is frozen at flow start."""

    bill_id: int = Field(frozen=True)
    amount: int = Field(frozen=True)  # centavos
    selected_method: PaymentMethod | None = None
    reference: str | None = None
