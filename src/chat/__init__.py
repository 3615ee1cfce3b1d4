"""Chat front-end: conversations, reply composition and the per-turn session."""

from .composer import ResponseComposer
from .conversation_store import ConversationStore
from .models import AssistantReply, Conversation, Message, PersonalitySnapshot, TurnResult
from .session import ChatSession, SessionBusyError, SessionState

__all__ = [
    "AssistantReply",
    "ChatSession",
    "Conversation",
    "ConversationStore",
    "Message",
    "PersonalitySnapshot",
    "ResponseComposer",
    "SessionBusyError",
    "SessionState",
    "TurnResult",
]
