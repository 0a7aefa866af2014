"""
Storage protocol definitions for memory records and vector search.

These protocols define the interface that storage implementations must provide.
They are implementation-agnostic and can be backed by various databases
(SQLite, PostgreSQL, Qdrant, in-memory, etc.).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from soulbond_memory.models import MemoryRecord, MemoryStats


@dataclass
class VectorMatch:
    """
    A candidate returned by a vector index.

    Attributes:
        record_id: ID of the memory record the vector belongs to
        score: Similarity to the query (higher is closer)
        metadata: Payload stored alongside the vector
    """

    record_id: str
    score: float
    metadata: Dict[str, Any] = field(default_factory=dict)


class MemoryRecordStore(Protocol):
    """
    Protocol for memory record persistence.

    Records are write-once; the only mutation after create() is deletion.
    Storage-layer errors propagate to the caller unchanged.
    """

    def create(self, record: MemoryRecord) -> MemoryRecord:
        """
        Persist a new record.

        Args:
            record: The record to store

        Returns:
            The stored record
        """
        ...

    def get(self, record_id: str) -> Optional[MemoryRecord]:
        """
        Retrieve a record by ID.

        Args:
            record_id: The record ID

        Returns:
            The record if found, None otherwise
        """
        ...

    def delete_expired(self, user_id: str, now: Optional[datetime] = None) -> int:
        """
        Delete a user's records whose expiry has passed.

        Args:
            user_id: The user ID
            now: Reference time (default: now)

        Returns:
            Number of records deleted
        """
        ...

    def list_by_significance(
        self,
        user_id: str,
        min_significance: float,
        exclude_expired: bool = True,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[MemoryRecord]:
        """
        List a user's records at or above a significance level.

        Args:
            user_id: The user ID
            min_significance: Minimum significance (inclusive)
            exclude_expired: Skip records whose expiry has passed
            limit: Maximum number of records to return
            now: Reference time for expiry checks (default: now)

        Returns:
            Records ordered by creation time, newest first
        """
        ...

    def stats(self, user_id: str) -> MemoryStats:
        """
        Summarize a user's stored records.

        Args:
            user_id: The user ID

        Returns:
            Totals by type and category, oldest creation time and average significance
        """
        ...


class MemoryVectorIndex(Protocol):
    """
    Protocol for the semantic search collaborator.

    Vectors are keyed by memory record ID so search hits can be resolved
    back through the MemoryRecordStore.
    """

    async def upsert(self, record_id: str, text: str, metadata: Dict[str, Any]) -> None:
        """
        Index (or re-index) the text of a record.

        Args:
            record_id: The record ID used as the vector key
            text: Text to embed
            metadata: Payload stored with the vector (must include user_id)
        """
        ...

    async def search(self, user_id: str, query_text: str, k: int) -> List[VectorMatch]:
        """
        Find a user's records most similar to a query.

        Args:
            user_id: Only this user's vectors are searched
            query_text: Text to search for
            k: Maximum number of matches

        Returns:
            Matches ordered by similarity, highest first
        """
        ...
