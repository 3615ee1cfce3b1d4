"""Tests for keyword signal extraction."""

import pytest

from learning.signals import (
    TOPIC_VOCABULARY,
    classify_formality,
    extract_topics,
    needs_current_info,
)
from shared_types import Formality


class TestClassifyFormality:
    def test_formal(self):
        assert classify_formality("Could you help me?") == Formality.FORMAL

    def test_casual(self):
        assert classify_formality("hey, yeah cool") == Formality.CASUAL

    def test_none(self):
        assert classify_formality("Tell me about rivers") == Formality.NONE

    def test_formal_wins_over_casual(self):
        assert classify_formality("Hey, could you please check this? Awesome.") == Formality.FORMAL

    def test_case_insensitive(self):
        assert classify_formality("KINDLY respond") == Formality.FORMAL
        assert classify_formality("AWESOME") == Formality.CASUAL

    def test_substring_without_word_boundary(self):
        # "they" contains "hey"
        assert classify_formality("they left early") == Formality.CASUAL


class TestExtractTopics:
    def test_vocabulary_order(self):
        assert extract_topics("I love programming and music") == ["programming", "music"]

    def test_order_follows_vocabulary_not_text(self):
        assert extract_topics("music before programming") == ["programming", "music"]

    def test_mixed_case_vocabulary_term(self):
        assert "AI" in extract_topics("tell me about ai safety")

    def test_substring_matches(self):
        # "art" inside "smart", "ai" inside "said"
        topics = extract_topics("she said it was smart")
        assert "art" in topics
        assert "AI" in topics

    def test_no_topics(self):
        assert extract_topics("nothing to see") == []

    def test_vocabulary_has_no_duplicates(self):
        lowered = [t.lower() for t in TOPIC_VOCABULARY]
        assert len(lowered) == len(set(lowered)) == 22


class TestNeedsCurrentInfo:
    @pytest.mark.parametrize(
        "text",
        ["What's the latest on this", "any news?", "what happened in 2025", "Give me an UPDATE"],
    )
    def test_positive(self, text):
        assert needs_current_info(text)

    def test_negative(self):
        assert not needs_current_info("Explain photosynthesis")

    def test_now_inside_know(self):
        assert needs_current_info("I don't know")
