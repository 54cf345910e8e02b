from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class AccountProfile(BaseModel):
    id: int | None = None
    uuid: str = ""
    account_number: str
    display_name: str = ""
    service_type: str = "Residential"
    meter_size: str = '1/2"'
    service_address: str = ""
    account_status: str = "Active"
    created_at: datetime | None = None

    @property
    def greeting_name(self) -> str:
        return self.display_name or "Valued Customer"
