from __future__ import annotations

import logging

from pydantic import BaseModel, ValidationError

from waterdesk.constants import CHATBOT_ISSUE_TYPE, ESCALATION_SENTINEL, QUICK_REPLIES
from waterdesk.exceptions import OracleFailure, ValidationRejected
from waterdesk.models.chat import (
    ORACLE_REPLY_SCHEMA,
    ChatMessage,
    ChatRole,
    ChatSession,
    ConversationState,
    OracleReply,
    TicketDraft,
)
from waterdesk.models.customer import AccountProfile
from waterdesk.oracle.base import TextOracle
from waterdesk.services.handoff_service import EscalationHandoff
from waterdesk.settings import settings

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = (
    "I'm currently experiencing some technical difficulties and can't respond right now. "
    "Please try again in a few moments. If the issue persists, you might want to report "
    "an issue directly through the portal."
)
ERROR_NOTICE = "Failed to get response from assistant."
TICKET_NOTICE = "Please review and submit the support ticket drafted from your chat."
NO_USER_QUERY = "User initiated ticket creation from chat."
ESCALATION_EXCERPT_SIZE = 5
REPORT_ISSUE_SECTION = "report_issue"


class EscalationResult(BaseModel):
    draft: TicketDraft
    navigate_to: str = REPORT_ISSUE_SECTION
    notice: str = TICKET_NOTICE


def strip_sentinel(text: str) -> tuple[str, bool]:
    if ESCALATION_SENTINEL not in text:
        return text, False
    return text.replace(ESCALATION_SENTINEL, "").strip(), True


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```") and stripped.endswith("```"):
        stripped = stripped[3:-3]
        if stripped.startswith("json"):
            stripped = stripped[4:]
    return stripped.strip()


def parse_reply(raw: str) -> OracleReply:
    """Read a structured ``{reply, escalate}`` answer, falling back to the sentinel.

    The sentinel is removed from the reply text in both cases.
    """
    try:
        structured = OracleReply.model_validate_json(_strip_code_fence(raw))
    except ValidationError:
        text, flagged = strip_sentinel(raw)
        return OracleReply(reply=text, escalate=flagged)
    text, flagged = strip_sentinel(structured.reply)
    return OracleReply(reply=text, escalate=structured.escalate or flagged)


class ConversationOrchestrator:
    def __init__(
        self,
        oracle: TextOracle,
        handoff: EscalationHandoff,
        *,
        assistant_name: str | None = None,
        utility_name: str | None = None,
        history_window: int | None = None,
        structured_replies: bool | None = None,
    ) -> None:
        self.oracle = oracle
        self.handoff = handoff
        self.assistant_name = assistant_name or settings.assistant_name
        self.utility_name = utility_name or settings.utility_name
        self.history_window = settings.chat_history_window if history_window is None else history_window
        self.structured_replies = (
            settings.oracle_structured_replies if structured_replies is None else structured_replies
        )
        self.session: ChatSession | None = None

    # ---- Session lifecycle ----

    def greeting(self, profile: AccountProfile) -> ChatMessage:
        return ChatMessage(
            role=ChatRole.ASSISTANT,
            text=(
                f"Hello, {profile.greeting_name}! I am {self.assistant_name}, your {self.utility_name} "
                f"virtual assistant. How can I help you today with your account "
                f"({profile.account_number or 'N/A'}) or other water service inquiries?"
            ),
        )

    def open(self, profile: AccountProfile) -> ChatSession:
        """Start a fresh session holding only the greeting."""
        self.session = ChatSession(profile=profile, messages=[self.greeting(profile)])
        logger.debug("Conversation opened for account %s", profile.account_number)
        return self.session

    def close(self) -> None:
        self.session = None

    def _require_session(self) -> ChatSession:
        if self.session is None:
            raise ValidationRejected("Conversation is not open")
        return self.session

    @property
    def escalation_offered(self) -> bool:
        return self.session is not None and self.session.escalation_offered

    def suggestions(self) -> list[str]:
        session = self._require_session()
        if len(session.messages) > 1 or session.escalation_offered:
            return []
        return list(QUICK_REPLIES)

    # ---- Prompting ----

    def system_instructions(self, profile: AccountProfile) -> str:
        if self.structured_replies:
            escalation_rule = (
                'set "escalate" to true. Set it to false whenever you are providing a direct answer '
                "or general guidance."
            )
            output_rule = (
                'Reply with a JSON object of the form {"reply": "<your message>", "escalate": <true|false>}.'
            )
        else:
            escalation_rule = (
                f'end your response with the exact phrase: "{ESCALATION_SENTINEL}". Do NOT use that '
                "phrase if you are providing a direct answer or general guidance."
            )
            output_rule = "Reply in plain text."
        return f"""You are {self.assistant_name}, the friendly and professional AI assistant for {self.utility_name}, a water utility provider in the Philippines.
Current Customer Details:
- Name: {profile.greeting_name}
- Account Number: {profile.account_number or 'Not available'}
- Service Type: {profile.service_type or 'Not specified'}

Your primary goals are:
1. Understand the customer's query accurately. Queries can be about billing, payments, account management, water quality, leaks, service interruptions, or how to use the portal.
2. Provide clear, concise, helpful, and empathetic responses.
3. If the query is answerable with general knowledge or common FAQ information (e.g. "how to pay my bill?", "what is FCDA?"), provide the answer.
4. If the query needs specific account data you don't have, explain that you cannot access real-time account details and point them to the right portal section (e.g. "My Bills").
5. If the customer expresses frustration, has a complex issue (like a persistent leak or no water for an extended time), or asks to speak to a human or create a ticket, ALWAYS offer to help them create a support ticket. In this scenario, and ONLY in this scenario, {escalation_rule}
6. Be polite, patient, and professional. Avoid technical jargon unless necessary and explain it if used.
7. If the query is vague, ask clarifying questions.
8. Do not make up information or promise actions you cannot perform.
9. Keep responses brief and to the point.

{output_rule}
Respond to the customer's latest message based on the conversation history."""

    def build_prompt(self, profile: AccountProfile, history: list[ChatMessage], user_text: str) -> str:
        """System instructions, the prior transcript, then the new user turn, as one string."""
        if self.history_window > 0:
            history = history[-self.history_window :]
        transcript = "\n".join(f"{m.role.value}: {m.text}" for m in history)
        return (
            f"{self.system_instructions(profile)}\n\n"
            f"Conversation History:\n{transcript}\n\n"
            f"New user message to respond to:\nuser: {user_text}"
        )

    # ---- Turns ----

    def submit(self, user_text: str) -> ChatMessage | None:
        """Send one user turn and return the assistant's reply.

        Returns None without touching the transcript when the text is blank or
        a reply is still pending.
        """
        session = self._require_session()
        if not user_text or not user_text.strip():
            return None
        if session.state == ConversationState.AWAITING_RESPONSE:
            logger.debug("Ignoring submit while a reply is pending")
            return None

        text = user_text.strip()
        history = list(session.messages)
        session.messages.append(ChatMessage(role=ChatRole.USER, text=text))
        session.state = ConversationState.AWAITING_RESPONSE
        session.error = ""

        prompt = self.build_prompt(session.profile, history, text)
        schema = ORACLE_REPLY_SCHEMA if self.structured_replies else None
        try:
            raw = self.oracle.generate(prompt, response_schema=schema)
        except OracleFailure as e:
            logger.warning(
                "Assistant reply failed for account %s: %s", session.profile.account_number, e, exc_info=True
            )
            reply = ChatMessage(role=ChatRole.ASSISTANT, text=APOLOGY_MESSAGE)
            session.messages.append(reply)
            session.error = ERROR_NOTICE
            session.state = ConversationState.ERROR_DISPLAYED
            return reply
        finally:
            if session.state == ConversationState.AWAITING_RESPONSE:
                session.state = ConversationState.IDLE

        parsed = parse_reply(raw)
        reply = ChatMessage(role=ChatRole.ASSISTANT, text=parsed.reply)
        session.messages.append(reply)
        if parsed.escalate and not session.escalation_offered:
            session.escalation_offered = True
            logger.info("Escalation offered to account %s", session.profile.account_number)
        return reply

    def dismiss_error(self) -> None:
        session = self._require_session()
        session.error = ""
        if session.state == ConversationState.ERROR_DISPLAYED:
            session.state = ConversationState.IDLE

    # ---- Escalation ----

    def _speaker(self, message: ChatMessage, profile: AccountProfile) -> str:
        if message.role == ChatRole.USER:
            return profile.display_name or "You"
        return self.assistant_name

    def draft_ticket(self, session: ChatSession) -> TicketDraft:
        excerpt = session.messages[-ESCALATION_EXCERPT_SIZE:]
        summary = "\n\n".join(f"{self._speaker(m, session.profile)}: {m.text}" for m in excerpt)
        first_query = next((m.text for m in session.messages if m.role == ChatRole.USER), NO_USER_QUERY)
        description = (
            f"Issue raised via Chatbot {self.assistant_name}:\n\n{summary}\n\n"
            f"Initial User Query (if available):\n{first_query}"
        )
        return TicketDraft(description=description, issue_type_suggestion=CHATBOT_ISSUE_TYPE)

    def escalate(self) -> EscalationResult:
        """Stage a ticket draft from the transcript and close the conversation."""
        session = self._require_session()
        if not session.escalation_offered:
            raise ValidationRejected("No support ticket has been offered in this conversation")
        draft = self.handoff.stage(self.draft_ticket(session))
        logger.info("Conversation escalated for account %s", session.profile.account_number)
        self.close()
        return EscalationResult(draft=draft)
