"""Learned personalization state derived from chat text."""

from .errors import StoreError, StoreReadError, StoreWriteError, ValidationError
from .models import Preference, Topic, Trait, TraitChange
from .store import LearningStore

__all__ = [
    "LearningStore",
    "Preference",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
    "Topic",
    "Trait",
    "TraitChange",
    "ValidationError",
]
