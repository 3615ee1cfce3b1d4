"""Shared enums and types for the learning assistant."""

from enum import StrEnum


class MessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class Formality(StrEnum):
    FORMAL = "formal"
    CASUAL = "casual"
    NONE = "none"
