"""Data models for learned preferences, knowledge topics and personality traits."""

from dataclasses import dataclass, field
from datetime import datetime

COMMUNICATION_STYLE = "communication_style"
FORMALITY_KEY = "formality"
ADAPTABILITY_TRAIT = "adaptability"


@dataclass
class Preference:
    id: str
    user_id: str
    preference_type: str
    preference_key: str
    preference_value: str
    confidence: float = 0.5
    learned_from: list[str] = field(default_factory=list)  # conversation ids, duplicates allowed
    last_updated: datetime = field(default_factory=datetime.now)
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class Topic:
    id: str
    user_id: str
    topic: str
    mention_count: int = 1
    related_keywords: list[str] = field(default_factory=list)
    notes: str = ""
    last_mentioned: datetime = field(default_factory=datetime.now)
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class TraitChange:
    """One entry in a trait's evolution history."""

    value: str
    timestamp: datetime
    reason: str

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "timestamp": self.timestamp.isoformat(),
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TraitChange":
        return cls(
            value=data["value"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            reason=data.get("reason", ""),
        )


@dataclass
class Trait:
    id: str
    user_id: str
    trait_name: str
    trait_value: str
    history: list[TraitChange] = field(default_factory=list)
    last_updated: datetime = field(default_factory=datetime.now)
    created_at: datetime = field(default_factory=datetime.now)


def confidence_band(score: float) -> str:
    """Display band for a confidence score: high (>= 0.8), medium (>= 0.5) or low."""
    if score >= 0.8:
        return "high"
    if score >= 0.5:
        return "medium"
    return "low"
