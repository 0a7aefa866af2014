"""
Decay-weighted memory retrieval.

Recent high-significance memories are ranked by significance scaled with an
age decay (episodic memories do not decay); semantic matches from the vector
index fill any remaining slots.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Literal, Optional

from soulbond_memory.config import DECAY_FLOOR, DECAY_HORIZON_DAYS, RETRIEVAL_MIN_SIGNIFICANCE
from soulbond_memory.models import MemoryRecord
from soulbond_memory.storage.protocols import MemoryRecordStore, MemoryVectorIndex, VectorMatch
from soulbond_memory.utils.timestamps import resolve_now

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class ScoredMemory:
    """
    A retrieved memory with its ranking details.

    Attributes:
        record: The memory record
        relevance_score: significance * decay_factor
        decay_factor: Age decay applied (1.0 for episodic)
        source: "recent" for decay-ranked records, "semantic" for vector matches
        similarity: Vector similarity for semantic matches
    """

    record: MemoryRecord
    relevance_score: float
    decay_factor: float
    source: Literal["recent", "semantic"] = "recent"
    similarity: Optional[float] = None


def calculate_decay_factor(record: MemoryRecord, now: Optional[datetime] = None) -> float:
    """
    Age decay for a memory.

    Non-episodic memories lose relevance linearly over 180 days down to a
    floor of 0.3; episodic memories always return 1.0.
    """
    if record.type == "episodic":
        return 1.0

    now = resolve_now(now)
    age_days = (now - record.created_at).total_seconds() / SECONDS_PER_DAY

    return min(1.0, max(DECAY_FLOOR, 1 - age_days / DECAY_HORIZON_DAYS))


def score_with_decay(record: MemoryRecord, now: Optional[datetime] = None) -> ScoredMemory:
    decay_factor = calculate_decay_factor(record, now)
    return ScoredMemory(
        record=record,
        relevance_score=record.significance * decay_factor,
        decay_factor=decay_factor,
    )


class DecayWeightedRetriever:
    """Retrieves a user's memories for prompt context."""

    def __init__(
        self,
        store: MemoryRecordStore,
        vector_index: Optional[MemoryVectorIndex] = None,
        min_significance: float = RETRIEVAL_MIN_SIGNIFICANCE,
    ):
        self.store = store
        self.vector_index = vector_index
        self.min_significance = min_significance

    async def _semantic_candidates(
        self, user_id: str, query_text: str, k: int
    ) -> List[VectorMatch]:
        if self.vector_index is None or not query_text or not query_text.strip():
            return []

        try:
            return await self.vector_index.search(user_id, query_text, k)
        except Exception as e:
            logger.warning(
                f"Vector search failed for user {user_id}, using recent memories only: {e}"
            )
            return []

    def rank_recent(
        self, user_id: str, limit: int, now: Optional[datetime] = None
    ) -> List[ScoredMemory]:
        """
        Rank recent high-significance memories by decayed relevance.

        Args:
            user_id: The user ID
            limit: Maximum number of memories
            now: Reference time (default: now)

        Returns:
            Memories sorted by relevance_score, highest first
        """
        now = resolve_now(now)
        records = self.store.list_by_significance(
            user_id, self.min_significance, exclude_expired=True, limit=limit, now=now
        )

        scored = [score_with_decay(record, now) for record in records]
        scored.sort(key=lambda item: item.relevance_score, reverse=True)

        return scored[:limit]

    async def retrieve(
        self,
        user_id: str,
        query_text: str,
        limit: int = 5,
        now: Optional[datetime] = None,
    ) -> List[ScoredMemory]:
        """
        Retrieve memories relevant to a query.

        Decay-ranked recent memories come first in their computed order;
        semantic matches not already included fill the remaining slots.

        Args:
            user_id: The user ID
            query_text: Current user message
            limit: Maximum number of memories
            now: Reference time (default: now)

        Returns:
            Up to ``limit`` ScoredMemory items
        """
        if limit <= 0:
            return []

        now = resolve_now(now)

        candidates = await self._semantic_candidates(user_id, query_text, limit * 2)
        ranked = self.rank_recent(user_id, limit, now)

        results = list(ranked)
        seen = {item.record.id for item in ranked}

        for match in candidates:
            if len(results) >= limit:
                break
            if match.record_id in seen:
                continue

            record = self.store.get(match.record_id)
            if record is None or record.user_id != user_id or record.is_expired(now):
                continue

            item = score_with_decay(record, now)
            item.source = "semantic"
            item.similarity = match.score
            results.append(item)
            seen.add(record.id)

        logger.info(
            f"Retrieved {len(results)} memories for user {user_id} "
            f"({len(ranked)} recent, {len(results) - len(ranked)} semantic)"
        )

        return results
