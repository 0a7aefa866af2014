"""Tests for the Qdrant vector index using qdrant-client's local in-memory mode."""

import uuid

import pytest

pytest.importorskip("qdrant_client")

from qdrant_client import QdrantClient  # noqa: E402

from soulbond_memory.storage.vector.qdrant import (  # noqa: E402
    MAX_PAYLOAD_CONTENT,
    QdrantVectorIndex,
)


@pytest.fixture
def qdrant_index(keyword_embedding):
    return QdrantVectorIndex(
        keyword_embedding,
        collection_name="test_memories",
        client=QdrantClient(":memory:"),
    )


def test_collection_created(qdrant_index):
    assert qdrant_index.client.collection_exists("test_memories")


def test_existing_collection_is_reused(keyword_embedding):
    client = QdrantClient(":memory:")
    QdrantVectorIndex(keyword_embedding, collection_name="shared", client=client)

    index = QdrantVectorIndex(keyword_embedding, collection_name="shared", client=client)

    assert index.client.collection_exists("shared")


@pytest.mark.asyncio
async def test_upsert_and_search_scoped_to_user(qdrant_index):
    sister_id = str(uuid.uuid4())
    work_id = str(uuid.uuid4())
    other_id = str(uuid.uuid4())

    await qdrant_index.upsert(sister_id, "my sister got engaged", {"user_id": "user1"})
    await qdrant_index.upsert(work_id, "work was long", {"user_id": "user1"})
    await qdrant_index.upsert(other_id, "my sister again", {"user_id": "user2"})

    matches = await qdrant_index.search("user1", "sister", k=5)

    assert [m.record_id for m in matches] == [sister_id, work_id]
    assert matches[0].metadata["user_id"] == "user1"


@pytest.mark.asyncio
async def test_payload_content_truncated(qdrant_index):
    record_id = str(uuid.uuid4())
    await qdrant_index.upsert(record_id, "music " * 500, {"user_id": "user1"})

    matches = await qdrant_index.search("user1", "music", k=1)

    assert len(matches[0].metadata["content"]) == MAX_PAYLOAD_CONTENT


@pytest.mark.asyncio
async def test_delete(qdrant_index):
    record_id = str(uuid.uuid4())
    await qdrant_index.upsert(record_id, "paris", {"user_id": "user1"})

    qdrant_index.delete(record_id)

    assert await qdrant_index.search("user1", "paris", k=5) == []
