"""
SQLAlchemy-based memory record storage implementation.

Provides a storage backend that works with any SQLAlchemy-compatible
database (PostgreSQL, SQLite, MySQL, etc.). Structured columns (context,
keywords) are stored as JSON text.
"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, DateTime, Engine, Float, Index, String, Text, func, or_
from sqlalchemy.orm import Session, declarative_base

from soulbond_memory.models import MemoryRecord, MemoryStats
from soulbond_memory.utils.timestamps import resolve_now, utc_now

logger = logging.getLogger(__name__)

# Create SQLAlchemy Base
Base = declarative_base()


class MemoryRecordDB(Base):
    """SQLAlchemy model for memory record storage."""

    __tablename__ = "memories"

    # Primary key
    id = Column(String, primary_key=True)

    # Ownership and classification
    user_id = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)
    category = Column(String, nullable=False)

    # Content
    content = Column(Text, nullable=False)
    significance = Column(Float, nullable=False)

    # JSON serialized
    context_json = Column(Text, nullable=False, default="{}")
    keywords_json = Column(Text, nullable=False, default="[]")

    # Timestamps
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    # Indexes
    __table_args__ = (
        Index("idx_memories_user_significance", "user_id", "significance"),
        Index("idx_memories_user_expires", "user_id", "expires_at"),
    )

    def to_memory_record(self) -> MemoryRecord:
        """Convert database model to MemoryRecord."""
        return MemoryRecord(
            id=self.id,
            user_id=self.user_id,
            type=self.type,
            category=self.category,
            content=self.content,
            context=json.loads(self.context_json) if self.context_json else {},
            significance=self.significance,
            keywords=json.loads(self.keywords_json) if self.keywords_json else [],
            expires_at=self.expires_at,
            created_at=self.created_at,
        )

    @staticmethod
    def from_memory_record(record: MemoryRecord) -> "MemoryRecordDB":
        """Create database model from MemoryRecord."""
        return MemoryRecordDB(
            id=record.id,
            user_id=record.user_id,
            type=record.type,
            category=record.category,
            content=record.content,
            significance=record.significance,
            context_json=json.dumps(record.context, default=str),
            keywords_json=json.dumps(record.keywords),
            expires_at=record.expires_at,
            created_at=record.created_at,
        )


class SQLAlchemyRecordStore:
    """
    SQLAlchemy-based memory record storage.

    Example:
        from sqlalchemy import create_engine
        engine = create_engine("sqlite:///memories.db")
        store = SQLAlchemyRecordStore(engine)
        store.create_tables()
    """

    def __init__(self, engine: Engine):
        """
        Initialize the SQLAlchemy record store.

        Args:
            engine: SQLAlchemy engine for database connection
        """
        self.engine = engine
        logger.info(f"SQLAlchemyRecordStore initialized (engine={engine.url})")

    @contextmanager
    def _session(self):
        """Context manager for database sessions with automatic commit/rollback."""
        session = Session(self.engine)
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            session.close()

    def create_tables(self):
        """Create database tables if they don't exist."""
        Base.metadata.create_all(self.engine)
        logger.info("Database tables created/verified")

    def create(self, record: MemoryRecord) -> MemoryRecord:
        """Persist a new record."""
        with self._session() as session:
            session.add(MemoryRecordDB.from_memory_record(record))

            logger.info(
                f"Stored memory {record.id} for user {record.user_id}: "
                f"{record.type}/{record.category} (significance={record.significance:.2f})"
            )

        return record

    def get(self, record_id: str) -> Optional[MemoryRecord]:
        """Retrieve a record by ID."""
        with self._session() as session:
            db_record = session.query(MemoryRecordDB).filter(MemoryRecordDB.id == record_id).first()

            if not db_record:
                return None

            return db_record.to_memory_record()

    def delete_expired(self, user_id: str, now: Optional[datetime] = None) -> int:
        """Delete a user's records whose expiry has passed."""
        now = resolve_now(now)

        with self._session() as session:
            count = (
                session.query(MemoryRecordDB)
                .filter(
                    MemoryRecordDB.user_id == user_id,
                    MemoryRecordDB.expires_at.isnot(None),
                    MemoryRecordDB.expires_at < now,
                )
                .delete(synchronize_session=False)
            )

            logger.info(f"Deleted {count} expired memories for user {user_id}")

            return count

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

        with self._session() as session:
            query = session.query(MemoryRecordDB).filter(
                MemoryRecordDB.user_id == user_id,
                MemoryRecordDB.significance >= min_significance,
            )

            if exclude_expired:
                query = query.filter(
                    or_(MemoryRecordDB.expires_at.is_(None), MemoryRecordDB.expires_at >= now)
                )

            query = query.order_by(MemoryRecordDB.created_at.desc())

            if limit is not None:
                query = query.limit(limit)

            return [db_record.to_memory_record() for db_record in query.all()]

    def stats(self, user_id: str) -> MemoryStats:
        """Summarize a user's stored records."""
        with self._session() as session:
            total, avg_significance, oldest = (
                session.query(
                    func.count(MemoryRecordDB.id),
                    func.avg(MemoryRecordDB.significance),
                    func.min(MemoryRecordDB.created_at),
                )
                .filter(MemoryRecordDB.user_id == user_id)
                .one()
            )

            if not total:
                return MemoryStats()

            by_type = (
                session.query(MemoryRecordDB.type, func.count(MemoryRecordDB.id))
                .filter(MemoryRecordDB.user_id == user_id)
                .group_by(MemoryRecordDB.type)
                .all()
            )
            by_category = (
                session.query(MemoryRecordDB.category, func.count(MemoryRecordDB.id))
                .filter(MemoryRecordDB.user_id == user_id)
                .group_by(MemoryRecordDB.category)
                .all()
            )

            return MemoryStats(
                total=total,
                by_type={memory_type: count for memory_type, count in by_type},
                by_category={category: count for category, count in by_category},
                oldest_created_at=oldest,
                avg_significance=float(avg_significance or 0.0),
            )
