"""Templated reply assembly from learned preferences, topics and history.

Template choice goes through an injectable ``choose`` callable so tests can
pin it. Nothing here writes to storage.
"""

import random
from collections.abc import Callable, Sequence

from learning.models import COMMUNICATION_STYLE, FORMALITY_KEY, Preference, Topic, Trait
from learning.signals import needs_current_info
from shared_types import Formality

from .models import AssistantReply, Message

Chooser = Callable[[Sequence[str]], str]
SearchFn = Callable[[str], list[str]]

SEARCH_QUERY_CHARS = 50

GREETINGS = [
    "Hello! I'm here to chat, learn, and grow with you. What's on your mind today?",
    "Hey there! I'm excited to continue learning from our conversations. How can I help you?",
    "Welcome! Every conversation with you helps me become a better assistant. What would you like to explore?",
    "Hi! I'm curious to hear your thoughts today. What brings you here?",
]

WELCOME_BACK = (
    "Welcome back! I remember our previous conversations. What would you like to explore today?"
)

CURIOSITY_PHRASES = [
    "That's fascinating! Tell me more about",
    "I'm really curious about",
    "I'd love to understand more about",
    "That's interesting! I'm learning that",
]

ACKNOWLEDGMENTS = [
    "I appreciate you sharing that with me.",
    "Thanks for helping me understand your perspective.",
    "I'm learning so much from our conversation.",
    "That's a great point.",
]

GENERIC_CLOSINGS = [
    "I'm always learning from our conversations, which helps me provide better responses tailored to you.",
    "Your input is helping me understand your unique perspective and communication style.",
    "I'm building a deeper understanding of the topics you care about most.",
    "Through our interactions, I'm developing insights that make our conversations more meaningful.",
    "Every exchange helps me adapt to better serve your needs and interests.",
]

PREFERENCES_CLOSING = (
    "I've learned quite a bit about your preferences, which allows me to engage with you "
    "in a way that feels natural and helpful."
)
HISTORY_CLOSING = (
    "Our conversation history is helping me understand the context and nuances of what matters to you."
)

# (formal, casual) variants
HOW_ARE_YOU = (
    "I'm functioning well, thank you for asking. I'm continuously evolving through our interactions. ",
    "I'm doing great! Every conversation helps me grow and understand you better. ",
)
THANKS = (
    "You're most welcome. It's my pleasure to assist you. ",
    "You're welcome! Happy to help anytime. ",
)
QUESTION_FOLLOWUP = (
    "Based on my understanding, I would approach this thoughtfully by considering multiple perspectives. ",
    "Let me think about this with you! ",
)
STATEMENT = (
    "I find your perspective quite interesting. ",
    "That's really cool! ",
)

ADAPTING_NOTE = (
    "\n\n✨ Our conversations have helped me understand your preferences better. "
    "I'm adapting my responses to match your style!"
)

ACK_HISTORY_THRESHOLD = 5
CONTEXT_HISTORY_THRESHOLD = 10
PREFERENCE_COUNT_THRESHOLD = 3
TOP_TOPICS = 3


def is_formal(preferences: list[Preference]) -> bool:
    return any(
        p.preference_type == COMMUNICATION_STYLE
        and p.preference_key == FORMALITY_KEY
        and p.preference_value == Formality.FORMAL
        for p in preferences
    )


class ResponseComposer:
    """Builds assistant replies from fixed templates."""

    def __init__(self, choose: Chooser | None = None, search: SearchFn | None = None):
        """
        Args:
            choose: picks one item from a candidate list; defaults to random.choice.
            search: optional lookup returning result lines for a query. Without it
                the search step only announces simulated results.
        """
        self._choose = choose or random.choice
        self._search = search

    def greeting(self) -> str:
        return self._choose(GREETINGS)

    def compose(
        self,
        user_message: str,
        preferences: list[Preference],
        topics: list[Topic],
        traits: list[Trait],
        history: list[Message],
    ) -> AssistantReply:
        """Assemble a reply. ``topics`` must already be ordered by mention count, descending."""
        search_performed = False
        search_query = None
        response = ""

        if needs_current_info(user_message):
            search_performed = True
            search_query = user_message[:SEARCH_QUERY_CHARS]
            response = self._search_preamble(search_query)

        response += self._personal_response(user_message, preferences, topics, history)

        if topics:
            top = ", ".join(t.topic for t in topics[:TOP_TOPICS])
            response += (
                f"\n\n💡 I've noticed you're interested in {top}. "
                "I'm building deeper knowledge in these areas to help you better!"
            )

        if traits and len(history) > CONTEXT_HISTORY_THRESHOLD:
            response += ADAPTING_NOTE

        return AssistantReply(
            message=response,
            search_performed=search_performed,
            search_query=search_query,
        )

    def _search_preamble(self, query: str) -> str:
        text = "Let me search for the most up-to-date information on that topic...\n\n"
        if self._search is None:
            text += f'[Simulated Search Results for: "{query}"]\n\n'
        else:
            results = self._search(query)
            text += f'[Search Results for: "{query}"]\n'
            text += "".join(f"- {r}\n" for r in results)
            text += "\n"
        text += "Based on current information, here's what I found: "
        return text

    def _personal_response(
        self,
        user_message: str,
        preferences: list[Preference],
        topics: list[Topic],
        history: list[Message],
    ) -> str:
        formal = is_formal(preferences)
        variant = 0 if formal else 1
        lowered = user_message.lower()
        relevant = [t for t in topics if t.topic.lower() in lowered]

        response = ""
        if len(history) > ACK_HISTORY_THRESHOLD:
            response += self._choose(ACKNOWLEDGMENTS) + " "

        if relevant:
            topic = relevant[0]
            response += f"I remember we've discussed {topic.topic} {topic.mention_count} times before. "

        if "how are you" in lowered:
            response += HOW_ARE_YOU[variant]
        elif "thank" in lowered:
            response += THANKS[variant]
        elif "?" in user_message:
            response += f"{self._choose(CURIOSITY_PHRASES)} your question. "
            response += QUESTION_FOLLOWUP[variant]
        else:
            response += STATEMENT[variant]

        return response + self._closing(preferences, history)

    def _closing(self, preferences: list[Preference], history: list[Message]) -> str:
        if len(preferences) > PREFERENCE_COUNT_THRESHOLD:
            return PREFERENCES_CLOSING
        if len(history) > CONTEXT_HISTORY_THRESHOLD:
            return HISTORY_CLOSING
        return self._choose(GENERIC_CLOSINGS)
