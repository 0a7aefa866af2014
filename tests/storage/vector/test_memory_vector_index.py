"""
Unit tests for the in-memory vector index.

Uses a deterministic keyword embedder so similarity ordering is predictable.
"""

import pytest

from soulbond_memory.storage.vector.memory import InMemoryVectorIndex


@pytest.fixture
def vector_index(keyword_embedding):
    """Create a fresh in-memory vector index."""
    return InMemoryVectorIndex(keyword_embedding)


@pytest.mark.asyncio
async def test_upsert_and_search(vector_index):
    await vector_index.upsert("m1", "My sister loves hiking", {"user_id": "user1"})
    await vector_index.upsert("m2", "Work was stressful", {"user_id": "user1"})

    matches = await vector_index.search("user1", "hiking with my sister", k=5)

    assert [m.record_id for m in matches] == ["m1", "m2"]
    assert matches[0].score > matches[1].score
    assert matches[0].metadata["content"] == "My sister loves hiking"


@pytest.mark.asyncio
async def test_search_filters_by_user(vector_index):
    await vector_index.upsert("m1", "My sister", {"user_id": "user1"})
    await vector_index.upsert("m2", "My sister", {"user_id": "user2"})

    matches = await vector_index.search("user2", "sister", k=5)

    assert [m.record_id for m in matches] == ["m2"]


@pytest.mark.asyncio
async def test_search_respects_k(vector_index):
    for i in range(4):
        await vector_index.upsert(f"m{i}", "my dog", {"user_id": "user1"})

    assert len(await vector_index.search("user1", "dog", k=2)) == 2
    assert await vector_index.search("user1", "dog", k=0) == []


@pytest.mark.asyncio
async def test_search_empty_index(vector_index):
    assert await vector_index.search("user1", "anything", k=3) == []


@pytest.mark.asyncio
async def test_upsert_replaces_existing(vector_index):
    await vector_index.upsert("m1", "exam stress", {"user_id": "user1"})
    await vector_index.upsert("m1", "music night", {"user_id": "user1"})

    matches = await vector_index.search("user1", "music", k=5)

    assert len(vector_index) == 1
    assert matches[0].metadata["content"] == "music night"


@pytest.mark.asyncio
async def test_delete(vector_index):
    await vector_index.upsert("m1", "paris trip", {"user_id": "user1"})

    assert vector_index.delete("m1") is True
    assert vector_index.delete("m1") is False
    assert await vector_index.search("user1", "paris", k=5) == []


def test_cosine_similarity_dimension_mismatch():
    with pytest.raises(ValueError):
        InMemoryVectorIndex._cosine_similarity([1.0, 0.0], [1.0])
