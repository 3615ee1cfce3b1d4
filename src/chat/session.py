"""Chat session. Runs one turn at a time: store, learn, compose, store."""

import asyncio
import time
from datetime import date
from enum import StrEnum

import structlog

from learning.errors import StoreError, ValidationError, require
from learning.models import ADAPTABILITY_TRAIT, COMMUNICATION_STYLE, FORMALITY_KEY
from learning.signals import classify_formality, extract_topics
from learning.store import LearningStore
from shared_types import Formality, MessageRole

from .composer import WELCOME_BACK, ResponseComposer
from .conversation_store import ConversationStore
from .models import Conversation, Message, PersonalitySnapshot, TurnResult

logger = structlog.get_logger()

ADAPTABILITY_REASON = "Learned multiple user preferences through sustained interaction"
CONTEXT_SUMMARY_CHARS = 100

DEFAULT_SESSION_CONFIG = {
    "formality_min_history": 3,
    "formality_confidence": 0.7,
    "adaptability_interval": 5,
    "adaptability_min_preferences": 3,
}


class SessionState(StrEnum):
    IDLE = "idle"
    AWAITING_INPUT = "awaiting_input"
    PROCESSING = "processing"


class SessionStateError(RuntimeError):
    """send() called when the session cannot accept a message."""


class SessionBusyError(SessionStateError):
    """send() called while a previous turn is still processing."""


class ChatSession:
    """One user's chat session over a single conversation."""

    def __init__(
        self,
        user_id: str,
        conversations: ConversationStore,
        learning: LearningStore,
        composer: ResponseComposer | None = None,
        config: dict | None = None,
        interaction_count: int = 0,
    ):
        """
        Args:
            user_id: opaque identity of the caller.
            conversations: message and conversation persistence.
            learning: preference/topic/trait persistence.
            composer: reply builder; a default one uses random template choice.
            config: overrides for DEFAULT_SESSION_CONFIG keys.
            interaction_count: turns already processed, for resumed sessions.
        """
        self.user_id = require(user_id, "user_id")
        self.conversations = conversations
        self.learning = learning
        self.composer = composer or ResponseComposer()
        self.config = {**DEFAULT_SESSION_CONFIG, **(config or {})}
        self.interaction_count = interaction_count
        self.state = SessionState.IDLE
        self.conversation: Conversation | None = None
        self.history: list[Message] = []

    async def start(self) -> str:
        """Resume the most recent conversation or open a new one. Returns the opening line."""
        recent = await self.conversations.get_recent_conversations(self.user_id, limit=1)
        if recent:
            self.conversation = recent[0]
            self.history = await self.conversations.get_messages(self.conversation.id)
            opening = WELCOME_BACK if self.history else self.composer.greeting()
            logger.info(
                "session.resumed",
                conversation_id=self.conversation.id,
                messages=len(self.history),
            )
        else:
            self.conversation = await self.conversations.create_conversation(self.user_id)
            self.history = []
            opening = self.composer.greeting()

        # Shown to the user, so it counts as history, but it is never persisted.
        self.history.append(
            Message(
                id=f"opening_{int(time.time() * 1000)}",
                conversation_id=self.conversation.id,
                role=MessageRole.ASSISTANT,
                content=opening,
            )
        )
        self.state = SessionState.AWAITING_INPUT
        return opening

    async def send(self, text: str) -> TurnResult:
        """Process one user message and return the assistant's reply.

        Raises StoreWriteError if the user message itself cannot be stored;
        later storage failures are logged and the reply is still returned.
        """
        if self.state == SessionState.PROCESSING:
            raise SessionBusyError("A message is already being processed")
        if self.state != SessionState.AWAITING_INPUT or self.conversation is None:
            raise SessionStateError("Session not started")
        text = text.strip()
        if not text:
            raise ValidationError("message is required")

        self.state = SessionState.PROCESSING
        conversation_id = self.conversation.id
        try:
            try:
                user_msg = await self.conversations.add_message(
                    conversation_id, MessageRole.USER, text
                )
            except StoreError as e:
                logger.error("session.user_message_failed", error=str(e))
                raise

            prior = list(self.history)
            self.history.append(user_msg)

            await self._learn(text, prior)
            self.interaction_count += 1
            await self._apply_trait_policy()

            preferences = await self._read(self.learning.get_preferences, "preferences")
            topics = await self._read(self.learning.get_topics, "topics")
            traits = await self._read(self.learning.get_traits, "traits")
            reply = self.composer.compose(text, preferences, topics, traits, prior)

            assistant_msg = None
            try:
                assistant_msg = await self.conversations.add_message(
                    conversation_id, MessageRole.ASSISTANT, reply.message
                )
                self.history.append(assistant_msg)
            except StoreError as e:
                logger.warning("session.assistant_message_failed", error=str(e))

            try:
                await self.conversations.update_context(
                    conversation_id, f"Last discussed: {text[:CONTEXT_SUMMARY_CHARS]}"
                )
            except StoreError as e:
                logger.warning("session.context_update_failed", error=str(e))

            logger.info(
                "session.turn_complete",
                conversation_id=conversation_id,
                interactions=self.interaction_count,
                search_performed=reply.search_performed,
            )
            return TurnResult(reply=reply, user_message=user_msg, assistant_message=assistant_msg)
        finally:
            self.state = SessionState.AWAITING_INPUT

    async def personality_snapshot(self) -> PersonalitySnapshot:
        """Everything learned about the user, read concurrently."""
        results = await asyncio.gather(
            self.learning.get_preferences(self.user_id),
            self.learning.get_topics(self.user_id),
            self.learning.get_traits(self.user_id),
            return_exceptions=True,
        )
        names = ("preferences", "topics", "traits")
        loaded = []
        for name, result in zip(names, results):
            if isinstance(result, StoreError):
                logger.warning("session.snapshot_read_failed", collection=name, error=str(result))
                loaded.append([])
            elif isinstance(result, BaseException):
                raise result
            else:
                loaded.append(result)
        return PersonalitySnapshot(*loaded)

    async def _learn(self, text: str, prior: list[Message]) -> None:
        """Feed extracted signals into the store. Failures are logged, never raised."""
        if len(prior) > self.config["formality_min_history"]:
            formality = classify_formality(text)
            if formality != Formality.NONE:
                try:
                    await self.learning.update_preference(
                        self.user_id,
                        COMMUNICATION_STYLE,
                        FORMALITY_KEY,
                        formality.value,
                        self.conversation.id,
                        self.config["formality_confidence"],
                    )
                except StoreError as e:
                    logger.warning("session.preference_update_failed", error=str(e))

        note = f"Discussed on {date.today().isoformat()}"
        for topic in extract_topics(text):
            try:
                await self.learning.update_topic(self.user_id, topic, [topic.lower()], note)
            except StoreError as e:
                logger.warning("session.topic_update_failed", topic=topic, error=str(e))

    async def _apply_trait_policy(self) -> None:
        """Mark the user as highly adaptable once enough preferences are known.

        Checked every adaptability_interval turns. Fires at most once per user.
        """
        interval = self.config["adaptability_interval"]
        if self.interaction_count <= 0 or self.interaction_count % interval != 0:
            return
        try:
            traits = await self.learning.get_traits(self.user_id)
            preferences = await self.learning.get_preferences(self.user_id)
            if len(preferences) <= self.config["adaptability_min_preferences"]:
                return
            if any(t.trait_name == ADAPTABILITY_TRAIT for t in traits):
                return
            await self.learning.update_trait(
                self.user_id, ADAPTABILITY_TRAIT, "high", ADAPTABILITY_REASON
            )
        except StoreError as e:
            logger.warning("session.trait_update_failed", error=str(e))

    async def _read(self, fetch, collection: str) -> list:
        try:
            return await fetch(self.user_id)
        except StoreError as e:
            logger.warning("session.read_failed", collection=collection, error=str(e))
            return []
