from soulbond_memory.config import MEMORY_STORE_THRESHOLD
from soulbond_memory.models import MemoryContext, MemoryRecord, MemoryStats
from soulbond_memory.retrieval import DecayWeightedRetriever, ScoredMemory
from soulbond_memory.significance import MemorySignificance, SignificanceScorer
from soulbond_memory.storage import MemoryRecordStore, MemoryVectorIndex
from soulbond_memory.utils.timestamps import resolve_now
from datetime import datetime
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class MemoryService:
    def __init__(
        self,
        store: MemoryRecordStore,
        vector_index: Optional[MemoryVectorIndex] = None,
        scorer: Optional[SignificanceScorer] = None,
        min_significance: float = MEMORY_STORE_THRESHOLD,
    ):
        self.store = store
        self.vector_index = vector_index
        self.scorer = scorer or SignificanceScorer()
        self.min_significance = min_significance
        self.retriever = DecayWeightedRetriever(store, vector_index)


    def _build_record(
        self, context: MemoryContext, significance: MemorySignificance, now: datetime
    ) -> MemoryRecord:
        return MemoryRecord(
            user_id=context.user_id,
            type=significance.type,
            category=significance.category,
            content=f"User: {context.content}\nResponse: {context.response}",
            context={
                "sentiment": context.sentiment.model_dump(mode="json"),
                "significance": list(significance.reasons),
                "message_count": len(context.conversation_history),
                "trust_level": context.user_profile.trust_level,
            },
            significance=significance.score,
            keywords=significance.keywords,
            expires_at=significance.expires_at,
            created_at=now,
        )


    async def score_and_maybe_store(
        self, context: MemoryContext, now: Optional[datetime] = None
    ) -> Optional[MemoryRecord]:
        now = resolve_now(now)
        significance = self.scorer.calculate(context, now)

        # Ordinary turns are not remembered
        if significance.score < self.min_significance:
            logger.debug(
                f"Skipping memory for user {context.user_id}: "
                f"score={significance.score:.2f} < {self.min_significance}"
            )
            return None

        record = self.store.create(self._build_record(context, significance, now))

        if self.vector_index is not None:
            try:
                await self.vector_index.upsert(
                    record.id,
                    record.content,
                    {
                        "user_id": record.user_id,
                        "memory_id": record.id,
                        "type": record.type,
                        "category": record.category,
                        "significance": record.significance,
                        "created_at": record.created_at.isoformat(),
                    },
                )
            except Exception as e:
                logger.warning(f"Failed to index memory {record.id}, keeping record: {e}")

        logger.info(
            f"Memory stored: id={record.id}, type={record.type}, "
            f"category={record.category}, significance={record.significance:.2f}"
        )

        return record


    async def retrieve_context(
        self,
        user_id: str,
        query: str,
        limit: int = 5,
        now: Optional[datetime] = None,
    ) -> List[ScoredMemory]:
        return await self.retriever.retrieve(user_id, query, limit, now)


    def cleanup_expired(self, user_id: str, now: Optional[datetime] = None) -> int:
        return self.store.delete_expired(user_id, now)


    def get_stats(self, user_id: str) -> MemoryStats:
        return self.store.stats(user_id)
