"""Stored record model: one row per document in a named collection.

The SQL backend treats the database as a key-document store: every entity
kind (docs, folders, tasks, ...) is a *collection* and each entity is a JSON
body addressed by ``(collection, record_id)``. Updates replace the whole body,
so a field missing from the new body is gone after the write.
"""

from sqlalchemy import Column, Index, Integer, String, DateTime, JSON, UniqueConstraint
from sqlalchemy.sql import func
from ..database import Base


class StoredRecord(Base):
    """A single JSON document inside a collection."""

    __tablename__ = "records"
    __table_args__ = (
        UniqueConstraint("collection", "record_id", name="uq_records_collection_record_id"),
        Index("ix_records_collection", "collection"),
    )

    # Monotonic arrival sequence; list() returns rows in this order.
    seq = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String(50), nullable=False)
    record_id = Column(String(100), nullable=False)
    body = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
