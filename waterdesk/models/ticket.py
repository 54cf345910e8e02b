from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class TicketStatus:
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class SupportTicket(BaseModel):
    id: int | None = None
    uuid: str = ""
    customer_id: int
    issue_type: str
    description: str
    status: str = TicketStatus.OPEN
    submitted_at: datetime | None = None
