from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from waterdesk.models.customer import AccountProfile


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: ChatRole
    text: str


class TicketDraft(BaseModel):
    """Support ticket drafted from a conversation. Write-once."""

    model_config = ConfigDict(frozen=True)

    description: str
    issue_type_suggestion: str


class OracleReply(BaseModel):
    """Structured assistant reply: natural-language text plus an escalation flag."""

    reply: str
    escalate: bool = False


# JSON schema sent to the oracle when structured replies are requested.
ORACLE_REPLY_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "reply": {"type": "STRING"},
        "escalate": {"type": "BOOLEAN"},
    },
    "required": ["reply", "escalate"],
}


class ConversationState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    ERROR_DISPLAYED = "error_displayed"


class ChatSession(BaseModel):
    """Transcript of one open conversation, owned by the orchestrator."""

    profile: AccountProfile
    messages: list[ChatMessage] = []
    state: ConversationState = ConversationState.IDLE
    escalation_offered: bool = False
    error: str = ""
