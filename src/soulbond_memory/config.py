"""
Configuration for the memory engine.

Tunable constants live here so that scoring, retention and retrieval agree
on the same numbers. Connection settings for the optional backends are
read from the environment by MemoryEngineSettings.from_env().
"""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Significance scoring
MEMORY_STORE_THRESHOLD = 3.0
MEMORY_MAX_SIGNIFICANCE = 10.0
EPISODIC_THRESHOLD = 8.0
LONG_TERM_THRESHOLD = 6.0
MEDIUM_TERM_THRESHOLD = 4.0

# Retention (days) per memory type; episodic memories never expire
RETENTION_DAYS = {
    "short": 7,
    "medium": 30,
    "long": 180,
}

# Engagement and relationship-stage bonuses
ENGAGED_CONVERSATION_LENGTH = 10
EARLY_RELATIONSHIP_TRUST = 30
EARLY_RELATIONSHIP_MIN_SCORE = 5.0

# Retrieval
RETRIEVAL_MIN_SIGNIFICANCE = 6.0
DECAY_HORIZON_DAYS = 180
DECAY_FLOOR = 0.3

# In-memory rate limiter sweep probability per call
RATE_LIMIT_CLEANUP_PROBABILITY = 0.01


class MemoryEngineSettings(BaseSettings):
    """
    Connection settings for the optional storage and counter backends.

    Values come from constructor arguments or the environment variables named
    by each field's alias (REDIS_URL, DATABASE_URL, ...). Malformed values
    raise a ValidationError instead of silently falling back to a default.
    """

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    redis_url: Optional[str] = Field(
        None, validation_alias="REDIS_URL", description="Shared counter store for rate limiting"
    )
    database_url: str = Field(
        "sqlite:///memories.db", validation_alias="DATABASE_URL", description="SQLAlchemy URL"
    )
    qdrant_host: Optional[str] = Field(
        None, validation_alias="QDRANT_HOST", description="Qdrant host for the vector index"
    )
    qdrant_port: int = Field(6333, validation_alias="QDRANT_PORT", description="Qdrant port")
    qdrant_collection: str = Field(
        "memories", validation_alias="QDRANT_COLLECTION", description="Qdrant collection name"
    )
    openai_api_key: Optional[str] = Field(
        None, validation_alias="OPENAI_API_KEY", description="API key for embeddings"
    )
    embedding_model: str = Field(
        "text-embedding-3-small",
        validation_alias="OPENAI_EMBEDDING_MODEL",
        description="Embedding model name",
    )
    rate_limit_fail_open: bool = Field(
        True,
        validation_alias="RATE_LIMIT_FAIL_OPEN",
        description="Allow traffic when the counter store is unreachable",
    )

    @property
    def vector_search_enabled(self) -> bool:
        """Semantic search needs both a Qdrant host and an embedding key."""
        return bool(self.qdrant_host and self.openai_api_key)

    @classmethod
    def from_env(cls) -> "MemoryEngineSettings":
        settings = cls()
        logger.debug(
            f"Loaded settings (redis={'yes' if settings.redis_url else 'no'}, "
            f"qdrant={settings.qdrant_host or 'no'}, database={settings.database_url})"
        )
        return settings
