"""Shared test fixtures for the learning assistant."""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "assistant.db"


@pytest.fixture
def learning_store(db_path):
    from learning.store import LearningStore

    return LearningStore(db_path)


@pytest.fixture
def conversation_store(db_path):
    from chat.conversation_store import ConversationStore

    return ConversationStore(db_path)


@pytest.fixture
def first_choice():
    """Deterministic template chooser: always the first candidate."""
    return lambda options: options[0]
