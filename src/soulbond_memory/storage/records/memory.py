"""
In-memory memory record storage implementation.

Provides a simple dictionary-backed store, suitable for testing and
single-instance deployments. For production use the SQLAlchemy store.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional

from soulbond_memory.models import MemoryRecord, MemoryStats
from soulbond_memory.utils.timestamps import resolve_now

logger = logging.getLogger(__name__)


class InMemoryRecordStore:
    """
    In-memory implementation of the MemoryRecordStore protocol.

    Stores records by ID with a per-user index. Data is lost on restart.
    """

    def __init__(self):
        # Store records by record ID
        self._records: Dict[str, MemoryRecord] = {}

        # Index by user_id for fast lookup
        self._user_records: Dict[str, List[str]] = {}  # user_id -> [record_ids]

        logger.info("InMemoryRecordStore initialized")

    def create(self, record: MemoryRecord) -> MemoryRecord:
        """Persist a new record."""
        if record.id in self._records:
            raise ValueError(f"Memory record {record.id} already exists")

        self._records[record.id] = record
        self._user_records.setdefault(record.user_id, []).append(record.id)

        logger.info(
            f"Stored memory {record.id} for user {record.user_id}: "
            f"{record.type}/{record.category} (significance={record.significance:.2f})"
        )

        return record

    def get(self, record_id: str) -> Optional[MemoryRecord]:
        """Retrieve a record by ID."""
        return self._records.get(record_id)

    def _user_iter(self, user_id: str) -> List[MemoryRecord]:
        return [
            self._records[rid]
            for rid in self._user_records.get(user_id, [])
            if rid in self._records
        ]

    def delete_expired(self, user_id: str, now: Optional[datetime] = None) -> int:
        """Delete a user's records whose expiry has passed."""
        now = resolve_now(now)

        expired_ids = [record.id for record in self._user_iter(user_id) if record.is_expired(now)]

        for record_id in expired_ids:
            del self._records[record_id]

        if expired_ids:
            remaining = set(expired_ids)
            self._user_records[user_id] = [
                rid for rid in self._user_records[user_id] if rid not in remaining
            ]

        logger.info(f"Deleted {len(expired_ids)} expired memories for user {user_id}")

        return len(expired_ids)

    def list_by_significance(
        self,
        user_id: str,
        min_significance: float,
        exclude_expired: bool = True,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[MemoryRecord]:
        """List a user's records at or above a significance level, newest first."""
        now = resolve_now(now)

        records = [
            record
            for record in self._user_iter(user_id)
            if record.significance >= min_significance
            and not (exclude_expired and record.is_expired(now))
        ]

        records.sort(key=lambda r: r.created_at, reverse=True)

        if limit is not None:
            records = records[:limit]

        logger.debug(
            f"Found {len(records)} memories for user {user_id} "
            f"(min_significance={min_significance})"
        )

        return records

    def stats(self, user_id: str) -> MemoryStats:
        """Summarize a user's stored records."""
        records = self._user_iter(user_id)

        if not records:
            return MemoryStats()

        return MemoryStats(
            total=len(records),
            by_type=dict(Counter(record.type for record in records)),
            by_category=dict(Counter(record.category for record in records)),
            oldest_created_at=min(record.created_at for record in records),
            avg_significance=sum(record.significance for record in records) / len(records),
        )

    def clear(self):
        """Clear ALL records from the store."""
        count = len(self._records)
        self._records.clear()
        self._user_records.clear()
        logger.info(f"Cleared all memories ({count} total)")
