"""
In-memory vector index implementation.

Provides a simple in-memory index with cosine similarity search, suitable
for testing and development. For production, use the Qdrant implementation.
"""

import logging
from typing import Any, Dict, List

from soulbond_memory.embeddings import TextEmbedding
from soulbond_memory.storage.protocols import VectorMatch

logger = logging.getLogger(__name__)


class InMemoryVectorIndex:
    """
    In-memory implementation of the MemoryVectorIndex protocol.

    Stores vectors and payloads in a dictionary keyed by record ID.
    Data is lost on restart.
    """

    def __init__(self, embedding: TextEmbedding):
        self.embedding = embedding
        self._vectors: Dict[str, Dict[str, Any]] = {}  # record_id -> {vector, payload}

        logger.info(f"InMemoryVectorIndex initialized (model={embedding.model_name})")

    @staticmethod
    def _cosine_similarity(vec1: List[float], vec2: List[float]) -> float:
        """Calculate cosine similarity between two vectors."""
        if len(vec1) != len(vec2):
            raise ValueError("Vectors must have the same length")

        dot_product = sum(a * b for a, b in zip(vec1, vec2))
        magnitude1 = sum(a * a for a in vec1) ** 0.5
        magnitude2 = sum(b * b for b in vec2) ** 0.5

        if magnitude1 == 0 or magnitude2 == 0:
            return 0.0

        return dot_product / (magnitude1 * magnitude2)

    async def upsert(self, record_id: str, text: str, metadata: Dict[str, Any]) -> None:
        """Index (or re-index) the text of a record."""
        vector = await self.embedding.embed_document(text)

        self._vectors[record_id] = {
            "vector": vector,
            "payload": {**metadata, "content": text},
        }

        logger.debug(f"Indexed memory {record_id}: '{text[:50]}...'")

    async def search(self, user_id: str, query_text: str, k: int) -> List[VectorMatch]:
        """Find a user's records most similar to a query."""
        if k <= 0 or not self._vectors:
            return []

        query_vector = await self.embedding.embed_query(query_text)

        results = []
        for record_id, entry in self._vectors.items():
            payload = entry["payload"]

            if payload.get("user_id") != user_id:
                continue

            score = self._cosine_similarity(query_vector, entry["vector"])
            results.append(VectorMatch(record_id=record_id, score=score, metadata=dict(payload)))

        # Sort by score (highest first) and limit to k
        results.sort(key=lambda match: match.score, reverse=True)
        results = results[:k]

        logger.debug(f"{len(results)} vector matches for user {user_id}")

        return results

    def delete(self, record_id: str) -> bool:
        """Remove a record's vector; returns False if it was not indexed."""
        return self._vectors.pop(record_id, None) is not None

    def __len__(self) -> int:
        return len(self._vectors)
