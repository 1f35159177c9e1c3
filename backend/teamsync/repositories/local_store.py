"""Local-storage record store: the development mock of the document database.

Each collection is one JSON array in ``<dir>/teamsync_<collection>.json``,
written atomically (temp file + rename). Empty collections can be seeded with
sample data on first read.

Every call is a read-modify-write of the whole array, so calls on the same
collection are serialized by a per-collection ``asyncio.Lock``; without it two
interleaved writers would each write back a stale array and one update would
be lost. The optional simulated latency sits between the read and the write,
inside the lock.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..exceptions import DuplicateRecordError, RecordNotFoundError, StorageError
from .base import RecordStore

logger = logging.getLogger(__name__)

FILE_PREFIX = "teamsync_"

SeedProvider = Callable[[str], List[Dict[str, Any]]]


class LocalRecordStore(RecordStore):
    """``RecordStore`` over JSON files in a directory."""

    def __init__(
        self,
        directory: str | Path,
        latency_ms: int = 0,
        seed: Optional[SeedProvider] = None,
    ):
        self.directory = Path(directory)
        self.latency = max(latency_ms, 0) / 1000.0
        self.seed = seed
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock(self, collection: str) -> asyncio.Lock:
        lock = self._locks.get(collection)
        if lock is None:
            lock = self._locks[collection] = asyncio.Lock()
        return lock

    def _path(self, collection: str) -> Path:
        return self.directory / f"{FILE_PREFIX}{collection}.json"

    def _read(self, collection: str) -> List[Dict[str, Any]]:
        path = self._path(collection)
        try:
            if not path.exists():
                records = self.seed(collection) if self.seed else []
                if records:
                    self._write(collection, records)
                    logger.info("Seeded local collection", extra={"collection": collection, "count": len(records)})
                return records
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read local collection '{collection}'", collection, e) from e
        if not isinstance(data, list):
            raise StorageError(f"Local collection '{collection}' is not a JSON array", collection)
        return data

    def _write(self, collection: str, records: List[Dict[str, Any]]) -> None:
        path = self._path(collection)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, ensure_ascii=False)
            os.replace(tmp_name, path)
        except OSError as e:
            raise StorageError(f"Cannot write local collection '{collection}'", collection, e) from e

    async def _simulate_latency(self) -> None:
        await asyncio.sleep(self.latency)

    @staticmethod
    def _index_of(records: List[Dict[str, Any]], record_id: str) -> int:
        for i, body in enumerate(records):
            if body.get("id") == record_id:
                return i
        return -1

    async def list_records(self, collection: str) -> List[Dict[str, Any]]:
        async with self._lock(collection):
            records = self._read(collection)
            await self._simulate_latency()
            return [dict(b) for b in records]

    async def insert(self, collection: str, record_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock(collection):
            records = self._read(collection)
            await self._simulate_latency()
            if self._index_of(records, record_id) >= 0:
                raise DuplicateRecordError(collection, record_id)
            stored = {**body, "id": record_id}
            records.append(stored)
            self._write(collection, records)
            return dict(stored)

    async def replace(self, collection: str, record_id: str, body: Dict[str, Any]) -> None:
        async with self._lock(collection):
            records = self._read(collection)
            await self._simulate_latency()
            idx = self._index_of(records, record_id)
            if idx < 0:
                raise RecordNotFoundError(collection, record_id)
            records[idx] = {**body, "id": record_id}
            self._write(collection, records)

    async def remove(self, collection: str, record_id: str) -> bool:
        async with self._lock(collection):
            records = self._read(collection)
            await self._simulate_latency()
            remaining = [b for b in records if b.get("id") != record_id]
            if len(remaining) == len(records):
                return False
            self._write(collection, remaining)
            return True

    async def prune(self, collection: str, keep: int) -> int:
        async with self._lock(collection):
            records = self._read(collection)
            dropped = max(len(records) - keep, 0)
            if dropped:
                self._write(collection, records[dropped:])
            return dropped
