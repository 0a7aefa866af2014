"""
Unit tests for MemoryService.

Tests the service layer with real in-memory stores and mocked collaborators
to verify scoring, persistence, indexing and retrieval orchestration.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, Mock

import pytest

from soulbond_memory.memory_service import MemoryService
from soulbond_memory.models import (
    CrisisIndicators,
    MemoryContext,
    SentimentAnalysis,
    UserProfile,
)
from soulbond_memory.storage.records.memory import InMemoryRecordStore
from soulbond_memory.storage.vector.memory import InMemoryVectorIndex


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def mock_vector_index():
    """Mock vector index."""
    index = Mock()
    index.upsert = AsyncMock(return_value=None)
    index.search = AsyncMock(return_value=[])
    return index


@pytest.fixture
def memory_service(store, mock_vector_index):
    return MemoryService(store=store, vector_index=mock_vector_index)


@pytest.fixture
def disclosure_context():
    """A heartfelt turn from an early-stage relationship."""
    return MemoryContext(
        user_id="user1",
        content=(
            "I love you, thank you for always being there, "
            "this is the first time I've told anyone that"
        ),
        response="That means so much to me.",
        sentiment=SentimentAnalysis(primary_emotion="joy", emotional_intensity=8),
        conversation_history=[{"role": "user", "content": "hi"}] * 15,
        user_profile=UserProfile(trust_level=20),
    )


@pytest.fixture
def small_talk_context():
    return MemoryContext(
        user_id="user1",
        content="ok sounds good",
        response="Great!",
        sentiment=SentimentAnalysis(emotional_intensity=1),
    )


@pytest.mark.asyncio
async def test_significant_turn_is_stored(memory_service, store, disclosure_context, now):
    record = await memory_service.score_and_maybe_store(disclosure_context, now)

    assert record is not None
    assert store.get(record.id) == record
    assert record.type == "medium"
    assert record.category == "romance"
    assert record.significance == pytest.approx(5.9)
    assert record.expires_at == now + timedelta(days=30)
    assert record.created_at == now
    assert record.content == (
        f"User: {disclosure_context.content}\nResponse: That means so much to me."
    )


@pytest.mark.asyncio
async def test_record_context_snapshot(memory_service, disclosure_context, now):
    record = await memory_service.score_and_maybe_store(disclosure_context, now)

    assert record.context["sentiment"]["primary_emotion"] == "joy"
    assert record.context["message_count"] == 15
    assert record.context["trust_level"] == 20
    assert "Relationship milestone" in record.context["significance"]


@pytest.mark.asyncio
async def test_stored_record_is_indexed(
    memory_service, mock_vector_index, disclosure_context, now
):
    record = await memory_service.score_and_maybe_store(disclosure_context, now)

    mock_vector_index.upsert.assert_awaited_once()
    record_id, text, metadata = mock_vector_index.upsert.await_args.args
    assert record_id == record.id
    assert text == record.content
    assert metadata["user_id"] == "user1"
    assert metadata["memory_id"] == record.id
    assert metadata["type"] == "medium"
    assert metadata["created_at"] == now.isoformat()


@pytest.mark.asyncio
async def test_ordinary_turn_is_not_stored(
    memory_service, store, mock_vector_index, small_talk_context, now
):
    record = await memory_service.score_and_maybe_store(small_talk_context, now)

    assert record is None
    assert store.stats("user1").total == 0
    mock_vector_index.upsert.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_not_called_below_threshold(small_talk_context, now):
    store = Mock()

    service = MemoryService(store=store)
    await service.score_and_maybe_store(small_talk_context, now)

    store.create.assert_not_called()


@pytest.mark.asyncio
async def test_score_at_threshold_is_stored(store, now):
    context = MemoryContext(
        user_id="user1",
        content="hard day",
        sentiment=SentimentAnalysis(
            emotional_intensity=10, crisis_indicators=CrisisIndicators(severity=2)
        ),
    )

    record = await MemoryService(store=store).score_and_maybe_store(context, now)

    assert record is not None
    assert record.significance == pytest.approx(3.0)
    assert record.type == "short"


@pytest.mark.asyncio
async def test_index_failure_keeps_record(
    memory_service, store, mock_vector_index, disclosure_context, now
):
    mock_vector_index.upsert.side_effect = RuntimeError("embedding service down")

    record = await memory_service.score_and_maybe_store(disclosure_context, now)

    assert record is not None
    assert store.get(record.id) is not None


@pytest.mark.asyncio
async def test_store_failure_propagates(mock_vector_index, disclosure_context, now):
    store = Mock()
    store.create.side_effect = RuntimeError("database unavailable")
    service = MemoryService(store=store, vector_index=mock_vector_index)

    with pytest.raises(RuntimeError, match="database unavailable"):
        await service.score_and_maybe_store(disclosure_context, now)

    mock_vector_index.upsert.assert_not_awaited()


@pytest.mark.asyncio
async def test_crisis_turn_is_episodic(store, now):
    context = MemoryContext(
        user_id="user1",
        content="Please remember this, I feel like I can't go on",
        response="I'm here with you.",
        sentiment=SentimentAnalysis(
            primary_emotion="despair", emotional_intensity=10, response_urgency="crisis"
        ),
    )

    record = await MemoryService(store=store).score_and_maybe_store(context, now)

    assert record.type == "episodic"
    assert record.expires_at is None
    assert record.category == "despair"


@pytest.mark.asyncio
async def test_retrieve_context_round_trip(store, keyword_embedding, now):
    service = MemoryService(store=store, vector_index=InMemoryVectorIndex(keyword_embedding))
    context = MemoryContext(
        user_id="user1",
        content="Please remember that my sister lives in Paris",
        sentiment=SentimentAnalysis(emotional_intensity=5),
    )
    record = await service.score_and_maybe_store(context, now)

    results = await service.retrieve_context("user1", "visiting my sister", now=now)

    # 1.5 intensity + 0.5 personal + 2 request = 4.0, below the retrieval threshold
    assert record.type == "medium"
    assert [item.record.id for item in results] == [record.id]
    assert results[0].source == "semantic"


def test_cleanup_and_stats(store, make_record, now):
    service = MemoryService(store=store)
    store.create(make_record(memory_type="short", age_days=10, expires_in_days=7))
    store.create(make_record(memory_type="episodic", significance=9.0))

    assert service.cleanup_expired("user1", now) == 1
    stats = service.get_stats("user1")
    assert stats.total == 1
    assert stats.by_type == {"episodic": 1}
