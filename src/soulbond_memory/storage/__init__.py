"""
Storage protocols for memory records and vector search.

Provides protocol definitions for storage backends. Implementations can use
various databases (SQLite, PostgreSQL, Qdrant, in-memory, etc.) as long as
they satisfy the protocol interface.
"""

from soulbond_memory.storage.protocols import MemoryRecordStore, MemoryVectorIndex, VectorMatch

__all__ = [
    "MemoryRecordStore",
    "MemoryVectorIndex",
    "VectorMatch",
]

# Record storage implementations
try:
    from soulbond_memory.storage.records.memory import InMemoryRecordStore  # noqa: F401

    __all__.append("InMemoryRecordStore")
except ImportError:
    pass

try:
    from soulbond_memory.storage.records.sqlalchemy import SQLAlchemyRecordStore  # noqa: F401

    __all__.append("SQLAlchemyRecordStore")
except ImportError:
    pass

# Vector index implementations
try:
    from soulbond_memory.storage.vector.memory import InMemoryVectorIndex  # noqa: F401

    __all__.append("InMemoryVectorIndex")
except ImportError:
    pass

try:
    from soulbond_memory.storage.vector.qdrant import QdrantVectorIndex  # noqa: F401

    __all__.append("QdrantVectorIndex")
except ImportError:
    pass
