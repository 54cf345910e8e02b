import pytest
from pydantic import ValidationError

from waterdesk.models.chat import ChatMessage, ChatRole, ChatSession, ConversationState, OracleReply, TicketDraft
from waterdesk.models.customer import AccountProfile
from waterdesk.models.payment import PaymentIntent


class TestChatModels:
    def test_message_is_frozen(self):
        message = ChatMessage(role=ChatRole.USER, text="hi")
        with pytest.raises(ValidationError):
            message.text = "changed"

    def test_draft_is_frozen(self):
        draft = TicketDraft(description="d", issue_type_suggestion="Other Concern")
        with pytest.raises(ValidationError):
            draft.description = "x"

    def test_oracle_reply_default(self):
        assert OracleReply(reply="ok").escalate is False

    def test_session_defaults(self):
        session = ChatSession(profile=AccountProfile(account_number="A-1"))
        assert session.messages == []
        assert session.state == ConversationState.IDLE
        assert session.escalation_offered is False
        assert session.error == ""


class TestAccountProfile:
    def test_greeting_name(self):
        assert AccountProfile(account_number="A-1", display_name="Jose").greeting_name == "Jose"

    def test_greeting_name_fallback(self):
        assert AccountProfile(account_number="A-1").greeting_name == "Valued Customer"


class TestPaymentIntent:
    def test_amount_is_frozen(self):
        intent = PaymentIntent(bill_id=1, amount=25720)
        with pytest.raises(ValidationError):
            intent.amount = 1

    def test_method_can_change(self):
        intent = PaymentIntent(bill_id=1, amount=25720)
        intent.selected_method = "GCash"
        assert intent.selected_method == "GCash"
