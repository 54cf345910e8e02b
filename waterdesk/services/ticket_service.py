from __future__ import annotations

import logging

from pydantic import BaseModel

from waterdesk.constants import CUSTOMER_ISSUE_TYPES
from waterdesk.exceptions import ValidationRejected
from waterdesk.models.customer import AccountProfile
from waterdesk.models.ticket import SupportTicket
from waterdesk.repositories.base import TicketRepository
from waterdesk.services.handoff_service import EscalationHandoff

logger = logging.getLogger(__name__)


class ReportForm(BaseModel):
    issue_type: str = ""
    description: str = ""
    issue_address: str = ""
    from_chat: bool = False


class TicketService:
    def __init__(self, ticket_repo: TicketRepository, handoff: EscalationHandoff) -> None:
        self.ticket_repo = ticket_repo
        self.handoff = handoff

    def start_report(self, profile: AccountProfile) -> ReportForm:
        """Open an issue-report form, pre-filled from a staged chat draft if one exists."""
        form = ReportForm(issue_address=profile.service_address or profile.account_number)
        draft = self.handoff.consume()
        if draft is None:
            return form
        form.description = draft.description
        if draft.issue_type_suggestion in CUSTOMER_ISSUE_TYPES:
            form.issue_type = draft.issue_type_suggestion
        form.from_chat = True
        return form

    @staticmethod
    def validate(form: ReportForm) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not form.issue_type:
            errors["issue_type"] = "Please select an issue type."
        elif form.issue_type not in CUSTOMER_ISSUE_TYPES:
            errors["issue_type"] = f"Unknown issue type: {form.issue_type}"
        if not form.description.strip():
            errors["description"] = "Description cannot be empty."
        if not form.issue_address.strip():
            errors["issue_address"] = "Please specify the location of the issue."
        return errors

    def submit(self, profile: AccountProfile, form: ReportForm) -> SupportTicket:
        if profile.id is None:
            raise ValueError("Profile must have an id")
        errors = self.validate(form)
        if errors:
            raise ValidationRejected(" ".join(errors.values()))
        description = form.description.strip()
        if form.issue_address.strip() != (profile.service_address or profile.account_number):
            description = f"{description}\n\nLocation: {form.issue_address.strip()}"
        ticket = self.ticket_repo.create(
            SupportTicket(customer_id=profile.id, issue_type=form.issue_type, description=description)
        )
        logger.info("Support ticket %s submitted for account %s (%s)", ticket.id, profile.account_number, ticket.issue_type)
        return ticket

    def list_tickets(self, profile: AccountProfile) -> list[SupportTicket]:
        if profile.id is None:
            raise ValueError("Profile must have an id")
        return self.ticket_repo.list_by_customer(profile.id)
