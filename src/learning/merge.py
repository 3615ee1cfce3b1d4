"""Merge rules: compute the next stored record from an existing one and a new observation.

These functions never touch storage; LearningStore wraps each one in a
single transaction so the read and the write see the same record.
"""

import uuid
from datetime import datetime

from .models import Preference, Topic, Trait, TraitChange

CONFIDENCE_STEP = 0.1
MAX_CONFIDENCE = 1.0


def _new_id() -> str:
    return uuid.uuid4().hex[:16]


def bump_confidence(current: float, step: float = CONFIDENCE_STEP) -> float:
    """Raise confidence by step, capped at 1.0. Rounded so repeated steps land on exact tenths."""
    return min(MAX_CONFIDENCE, round(current + step, 10))


def merge_preference(
    existing: Preference | None,
    user_id: str,
    preference_type: str,
    preference_key: str,
    value: str,
    conversation_id: str,
    base_confidence: float = 0.5,
    now: datetime | None = None,
) -> Preference:
    """Reinforce or create a preference.

    A new value always replaces the stored one, and confidence still rises
    even when the value contradicts what was stored before.
    """
    now = now or datetime.now()
    if existing is None:
        return Preference(
            id=_new_id(),
            user_id=user_id,
            preference_type=preference_type,
            preference_key=preference_key,
            preference_value=value,
            confidence=min(MAX_CONFIDENCE, base_confidence),
            learned_from=[conversation_id],
            last_updated=now,
            created_at=now,
        )

    return Preference(
        id=existing.id,
        user_id=existing.user_id,
        preference_type=existing.preference_type,
        preference_key=existing.preference_key,
        preference_value=value,
        confidence=bump_confidence(existing.confidence),
        learned_from=[*existing.learned_from, conversation_id],
        last_updated=now,
        created_at=existing.created_at,
    )


def _union(stored: list[str], new: list[str]) -> list[str]:
    merged = list(stored)
    for kw in new:
        if kw not in merged:
            merged.append(kw)
    return merged


def merge_topic(
    existing: Topic | None,
    user_id: str,
    topic: str,
    keywords: list[str] | None = None,
    note: str = "",
    now: datetime | None = None,
) -> Topic:
    """Count another mention of topic, union its keywords and append the note."""
    now = now or datetime.now()
    keywords = keywords or []
    if existing is None:
        return Topic(
            id=_new_id(),
            user_id=user_id,
            topic=topic,
            mention_count=1,
            related_keywords=_union([], keywords),
            notes=note,
            last_mentioned=now,
            created_at=now,
        )

    notes = f"{existing.notes}\n{note}" if existing.notes else note
    return Topic(
        id=existing.id,
        user_id=existing.user_id,
        topic=existing.topic,
        mention_count=existing.mention_count + 1,
        related_keywords=_union(existing.related_keywords, keywords),
        notes=notes,
        last_mentioned=now,
        created_at=existing.created_at,
    )


def merge_trait(
    existing: Trait | None,
    user_id: str,
    trait_name: str,
    value: str,
    reason: str,
    now: datetime | None = None,
) -> Trait:
    """Set the trait's current value and append the change to its history."""
    now = now or datetime.now()
    change = TraitChange(value=value, timestamp=now, reason=reason)
    if existing is None:
        return Trait(
            id=_new_id(),
            user_id=user_id,
            trait_name=trait_name,
            trait_value=value,
            history=[change],
            last_updated=now,
            created_at=now,
        )

    return Trait(
        id=existing.id,
        user_id=existing.user_id,
        trait_name=existing.trait_name,
        trait_value=value,
        history=[*existing.history, change],
        last_updated=now,
        created_at=existing.created_at,
    )
