"""Shared fixtures for unit tests."""

import re
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from soulbond_memory.models import MemoryRecord

VOCABULARY = ["sister", "work", "hiking", "exam", "love", "dog", "paris", "music"]


class KeywordEmbedding:
    """
    Deterministic embedder for tests.

    One dimension per vocabulary word (occurrence count) plus a constant
    bias dimension, so no vector is ever all zeros.
    """

    def __init__(self, vocabulary: List[str] = VOCABULARY):
        self.vocabulary = vocabulary

    @property
    def dimension(self) -> int:
        return len(self.vocabulary) + 1

    @property
    def model_name(self) -> str:
        return "keyword-test"

    def _embed(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")
        words = re.findall(r"\w+", text.lower())
        return [float(words.count(word)) for word in self.vocabulary] + [0.1]

    async def embed_document(self, text: str) -> List[float]:
        return self._embed(text)

    async def embed_query(self, text: str) -> List[float]:
        return self._embed(text)


@pytest.fixture
def now():
    """Fixed reference time (UTC)."""
    return datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def keyword_embedding():
    return KeywordEmbedding()


@pytest.fixture
def make_record(now):
    """Factory for memory records with sensible defaults."""

    def _make(
        user_id="user1",
        significance=7.0,
        memory_type="long",
        age_days=0.0,
        expires_in_days=180,
        category="general",
        content="User: hello\nResponse: hi",
        **kwargs,
    ):
        created_at = now - timedelta(days=age_days)
        expires_at = None
        if memory_type != "episodic":
            expires_at = created_at + timedelta(days=expires_in_days)
        return MemoryRecord(
            user_id=user_id,
            type=memory_type,
            category=category,
            content=content,
            significance=significance,
            expires_at=expires_at,
            created_at=created_at,
            **kwargs,
        )

    return _make
