"""Keyword signals derived from raw user text.

Every check is a case-insensitive substring test against a fixed phrase
list. There is no tokenization, so "now" also matches "know" and "AI"
matches "said".
"""

from shared_types import Formality

FORMAL_PHRASES = ("please", "kindly", "would you", "could you")
CASUAL_PHRASES = ("hey", "yeah", "cool", "awesome")

RECENCY_PHRASES = ("latest", "recent", "current", "today", "now", "2025")
NEWS_PHRASES = ("what's happening", "news", "update")

TOPIC_VOCABULARY = (
    "technology",
    "programming",
    "AI",
    "machine learning",
    "web development",
    "science",
    "mathematics",
    "business",
    "design",
    "art",
    "music",
    "health",
    "fitness",
    "cooking",
    "travel",
    "books",
    "movies",
    "sports",
    "gaming",
    "psychology",
    "philosophy",
    "history",
)


def _contains_any(text: str, phrases) -> bool:
    lowered = text.lower()
    return any(p.lower() in lowered for p in phrases)


def classify_formality(text: str) -> Formality:
    """Formal beats casual when both phrase sets match."""
    if _contains_any(text, FORMAL_PHRASES):
        return Formality.FORMAL
    if _contains_any(text, CASUAL_PHRASES):
        return Formality.CASUAL
    return Formality.NONE


def extract_topics(text: str) -> list[str]:
    """Vocabulary terms found in text, in vocabulary order."""
    lowered = text.lower()
    return [t for t in TOPIC_VOCABULARY if t.lower() in lowered]


def needs_current_info(text: str) -> bool:
    return _contains_any(text, RECENCY_PHRASES) or _contains_any(text, NEWS_PHRASES)
