"""
soulbond-memory: significance-scored companion memory with decay-weighted retrieval.

Core components:
- significance: turn scoring, pattern tables, keyword and category extraction
- storage: protocols and backends for memory records and vector search
- retrieval: decay-weighted ranking of stored memories
- ratelimit: fixed-window rate limiting with plan tiers
- models: core data models (MemoryRecord, SentimentAnalysis, RateLimitResult, etc.)
"""

__version__ = "0.1.0"

from soulbond_memory.models import (
    CrisisIndicators,
    MemoryContext,
    MemoryRecord,
    MemoryStats,
    RateLimitEntry,
    RateLimitResult,
    SentimentAnalysis,
    UserProfile,
)
from soulbond_memory.memory_service import MemoryService
from soulbond_memory.retrieval import DecayWeightedRetriever, ScoredMemory

__all__ = [
    "__version__",
    # Models
    "CrisisIndicators",
    "SentimentAnalysis",
    "UserProfile",
    "MemoryContext",
    "MemoryRecord",
    "MemoryStats",
    "RateLimitEntry",
    "RateLimitResult",
    # Services
    "MemoryService",
    "DecayWeightedRetriever",
    "ScoredMemory",
]
