"""Data models for conversations and chat turns."""

from dataclasses import dataclass, field
from datetime import datetime

from learning.models import Preference, Topic, Trait
from shared_types import MessageRole


@dataclass
class Conversation:
    id: str
    user_id: str
    started_at: datetime = field(default_factory=datetime.now)
    last_interaction: datetime = field(default_factory=datetime.now)
    context_summary: str = ""


@dataclass
class Message:
    id: str
    conversation_id: str
    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class AssistantReply:
    """Composed reply text plus whether the simulated search ran."""

    message: str
    search_performed: bool = False
    search_query: str | None = None


@dataclass
class TurnResult:
    reply: AssistantReply
    user_message: Message
    assistant_message: Message | None = None  # None when the reply could not be stored


@dataclass
class PersonalitySnapshot:
    preferences: list[Preference] = field(default_factory=list)
    topics: list[Topic] = field(default_factory=list)
    traits: list[Trait] = field(default_factory=list)
