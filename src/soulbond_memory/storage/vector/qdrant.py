import logging
from typing import Any, Dict, List, Optional

from qdrant_client import QdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    MatchValue,
    PointStruct,
    VectorParams,
)

from soulbond_memory.embeddings import TextEmbedding
from soulbond_memory.storage.protocols import VectorMatch

logger = logging.getLogger(__name__)

# Payload content is truncated to keep points small
MAX_PAYLOAD_CONTENT = 1000


class QdrantVectorIndex:
    def __init__(
        self,
        embedding: TextEmbedding,
        host: str = "localhost",
        port: int = 6333,
        collection_name: str = "memories",
        client: Optional[QdrantClient] = None,
    ):
        """
        Initialize Qdrant vector index.

        Args:
            embedding: Embedder used for stored content and queries
            host: Qdrant host (default: localhost)
            port: Qdrant port (default: 6333)
            collection_name: Collection name (default: memories)
            client: Pre-built client (e.g. QdrantClient(":memory:")); overrides host/port
        """
        self.embedding = embedding
        self.client = client or QdrantClient(host=host, port=port)
        self.collection_name = collection_name
        self._init_collection()

    def _init_collection(self):
        if not self.client.collection_exists(self.collection_name):
            self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(
                    size=self.embedding.dimension, distance=Distance.COSINE
                ),
            )
            logger.info(
                f"Created Qdrant collection {self.collection_name} "
                f"(size={self.embedding.dimension})"
            )

    async def upsert(self, record_id: str, text: str, metadata: Dict[str, Any]) -> None:
        """
        Index the text of a memory record.

        Args:
            record_id: Memory record ID (a UUID string, used as the point ID)
            text: Content to embed
            metadata: Payload fields; must include user_id for filtered search
        """
        vector = await self.embedding.embed_document(text)
        payload = {**metadata, "content": text[:MAX_PAYLOAD_CONTENT]}

        self.client.upsert(
            collection_name=self.collection_name,
            points=[PointStruct(id=record_id, vector=vector, payload=payload)],
        )
        logger.debug(f"Indexed memory {record_id}: '{text[:50]}...'")

    async def search(self, user_id: str, query_text: str, k: int) -> List[VectorMatch]:
        """
        Find a user's memories most similar to a query.

        Args:
            user_id: Only points whose payload user_id matches are searched
            query_text: Text to search for
            k: Maximum number of matches

        Returns:
            Matches ordered by similarity, highest first
        """
        if k <= 0:
            return []

        query_vector = await self.embedding.embed_query(query_text)

        response = self.client.query_points(
            collection_name=self.collection_name,
            query=query_vector,
            query_filter=Filter(
                must=[FieldCondition(key="user_id", match=MatchValue(value=user_id))]
            ),
            limit=k,
            with_payload=True,
        )

        matches = [
            VectorMatch(record_id=str(point.id), score=point.score, metadata=point.payload or {})
            for point in response.points
        ]

        logger.debug(f"{len(matches)} vector matches for user {user_id}")
        return matches

    def delete(self, record_id: str) -> None:
        """Remove a record's point from the collection."""
        self.client.delete(collection_name=self.collection_name, points_selector=[record_id])
        logger.debug(f"Deleted vector for memory {record_id}")
