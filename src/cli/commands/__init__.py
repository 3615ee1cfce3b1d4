"""CLI command modules."""

from .chat import chat
from .evolution import evolution, history

__all__ = ["chat", "evolution", "history"]
