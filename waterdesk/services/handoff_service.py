from __future__ import annotations

import logging

from waterdesk.constants import CHATBOT_ISSUE_TYPE
from waterdesk.models.chat import TicketDraft
from waterdesk.staging.base import StagingArea

logger = logging.getLogger(__name__)

DESCRIPTION_KEY = "chatbot_issue_description"
ISSUE_TYPE_KEY = "chatbot_issue_type_suggestion"


class EscalationHandoff:
    """Passes a ticket draft from the conversation to the issue-report flow.

    At most one draft is staged at a time; a new ``stage()`` overwrites an
    unconsumed one. The reader clears it with ``consume()``.
    """

    def __init__(self, staging: StagingArea) -> None:
        self.staging = staging

    def stage(self, draft: TicketDraft) -> TicketDraft:
        if self.staging.get(DESCRIPTION_KEY) is not None:
            logger.info("Overwriting an unconsumed ticket draft")
        self.staging.put(DESCRIPTION_KEY, draft.description)
        self.staging.put(ISSUE_TYPE_KEY, draft.issue_type_suggestion)
        logger.info("Ticket draft staged: type=%s, %d chars", draft.issue_type_suggestion, len(draft.description))
        return draft

    def consume(self) -> TicketDraft | None:
        description = self.staging.get(DESCRIPTION_KEY)
        issue_type = self.staging.get(ISSUE_TYPE_KEY)
        self.staging.delete(DESCRIPTION_KEY)
        self.staging.delete(ISSUE_TYPE_KEY)
        if description is None:
            return None
        logger.info("Ticket draft consumed")
        return TicketDraft(description=description, issue_type_suggestion=issue_type or CHATBOT_ISSUE_TYPE)
