"""SQL-backed record store: the durable document database.

Bodies live in the ``records`` table as JSON. Each call opens a short-lived
SQLAlchemy session in a worker thread so queries never block the event loop.
An in-memory SQLite engine has a single shared connection, so calls on it are
serialized.
"""

import asyncio
import logging
import threading
from contextlib import contextmanager, nullcontext
from typing import Any, Callable, Dict, Iterator, List, TypeVar

import sqlalchemy.exc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..database import build_session_factory, init_db
from ..exceptions import DuplicateRecordError, RecordNotFoundError, StorageError
from ..models.record import StoredRecord
from .base import RecordStore

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


class SqlRecordStore(RecordStore):
    """``RecordStore`` over a SQLAlchemy engine (SQLite or PostgreSQL)."""

    def __init__(self, engine: Engine, session_factory: sessionmaker | None = None, create_tables: bool = True):
        self.engine = engine
        self.session_factory = session_factory or build_session_factory(engine)
        if create_tables:
            init_db(engine)
        self._guard = threading.Lock() if isinstance(engine.pool, StaticPool) else nullcontext()

    @contextmanager
    def _session(self, collection: str) -> Iterator[Session]:
        """Session scope that commits on success and maps driver errors to StorageError."""
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except sqlalchemy.exc.IntegrityError:
            db.rollback()
            raise
        except sqlalchemy.exc.SQLAlchemyError as e:
            db.rollback()
            logger.error("Record store failure", extra={"collection": collection, "error": str(e)})
            raise StorageError(f"Database operation failed on '{collection}'", collection, e) from e
        finally:
            db.close()

    def _run_sync(self, collection: str, fn: Callable[[Session], ResultT]) -> ResultT:
        with self._guard:
            with self._session(collection) as db:
                return fn(db)

    async def _run(self, collection: str, fn: Callable[[Session], ResultT]) -> ResultT:
        return await asyncio.to_thread(self._run_sync, collection, fn)

    @staticmethod
    def _find(db: Session, collection: str, record_id: str) -> StoredRecord | None:
        return (
            db.query(StoredRecord)
            .filter(StoredRecord.collection == collection, StoredRecord.record_id == record_id)
            .first()
        )

    async def list_records(self, collection: str) -> List[Dict[str, Any]]:
        def _list(db: Session) -> List[Dict[str, Any]]:
            rows = (
                db.query(StoredRecord)
                .filter(StoredRecord.collection == collection)
                .order_by(StoredRecord.seq)
                .all()
            )
            return [dict(row.body) for row in rows]

        return await self._run(collection, _list)

    async def insert(self, collection: str, record_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        def _insert(db: Session) -> Dict[str, Any]:
            if self._find(db, collection, record_id) is not None:
                raise DuplicateRecordError(collection, record_id)
            db.add(StoredRecord(collection=collection, record_id=record_id, body=body))
            db.flush()
            return dict(body)

        try:
            return await self._run(collection, _insert)
        except sqlalchemy.exc.IntegrityError as e:
            # Lost a race with a concurrent insert of the same id.
            raise DuplicateRecordError(collection, record_id) from e

    async def replace(self, collection: str, record_id: str, body: Dict[str, Any]) -> None:
        def _replace(db: Session) -> None:
            row = self._find(db, collection, record_id)
            if row is None:
                raise RecordNotFoundError(collection, record_id)
            # Assign a fresh dict so the JSON column is flagged dirty.
            row.body = dict(body)

        await self._run(collection, _replace)

    async def remove(self, collection: str, record_id: str) -> bool:
        def _remove(db: Session) -> bool:
            count = (
                db.query(StoredRecord)
                .filter(StoredRecord.collection == collection, StoredRecord.record_id == record_id)
                .delete()
            )
            return count > 0

        return await self._run(collection, _remove)

    async def prune(self, collection: str, keep: int) -> int:
        def _prune(db: Session) -> int:
            keep_seqs = [
                seq for (seq,) in (
                    db.query(StoredRecord.seq)
                    .filter(StoredRecord.collection == collection)
                    .order_by(StoredRecord.seq.desc())
                    .limit(keep)
                    .all()
                )
            ]
            query = db.query(StoredRecord).filter(StoredRecord.collection == collection)
            if keep_seqs:
                query = query.filter(StoredRecord.seq.notin_(keep_seqs))
            return query.delete(synchronize_session=False)

        return await self._run(collection, _prune)

    async def close(self) -> None:
        self.engine.dispose()
