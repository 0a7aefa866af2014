"""
Wiring from MemoryEngineSettings to ready-to-use components.

Optional backends are imported only when configured, so a deployment
without Qdrant or OpenAI needs neither extra installed.
"""

import logging
from typing import Optional

from sqlalchemy import create_engine

from soulbond_memory.config import MemoryEngineSettings
from soulbond_memory.memory_service import MemoryService
from soulbond_memory.ratelimit import RateLimiterSuite, create_rate_limit_backend
from soulbond_memory.storage import MemoryVectorIndex
from soulbond_memory.storage.records.sqlalchemy import SQLAlchemyRecordStore

logger = logging.getLogger(__name__)


def create_vector_index(settings: MemoryEngineSettings) -> Optional[MemoryVectorIndex]:
    """
    Build the Qdrant index with OpenAI embeddings, if configured.

    Returns:
        QdrantVectorIndex, or None when QDRANT_HOST or OPENAI_API_KEY is unset
    """
    if not settings.vector_search_enabled:
        logger.info("Semantic search disabled (QDRANT_HOST or OPENAI_API_KEY not set)")
        return None

    from soulbond_memory.embeddings.openai_embedding import OpenAIEmbedding
    from soulbond_memory.storage.vector.qdrant import QdrantVectorIndex

    embedding = OpenAIEmbedding(model=settings.embedding_model, api_key=settings.openai_api_key)
    return QdrantVectorIndex(
        embedding,
        host=settings.qdrant_host,
        port=settings.qdrant_port,
        collection_name=settings.qdrant_collection,
    )


def create_memory_service(settings: Optional[MemoryEngineSettings] = None) -> MemoryService:
    """
    Build a MemoryService backed by DATABASE_URL and, optionally, Qdrant.

    Tables are created if missing.
    """
    settings = settings or MemoryEngineSettings.from_env()

    store = SQLAlchemyRecordStore(create_engine(settings.database_url))
    store.create_tables()

    return MemoryService(store=store, vector_index=create_vector_index(settings))


def create_rate_limiter_suite(settings: Optional[MemoryEngineSettings] = None) -> RateLimiterSuite:
    """Build the named rate limiters over Redis (REDIS_URL) or a local backend."""
    settings = settings or MemoryEngineSettings.from_env()

    return RateLimiterSuite(
        create_rate_limit_backend(settings.redis_url),
        fail_open=settings.rate_limit_fail_open,
    )
