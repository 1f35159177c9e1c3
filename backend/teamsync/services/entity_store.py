"""Entity store: the in-memory single source of truth for one session.

Every mutation is applied to the local collections synchronously and then
persisted through the gateway in the background. Callers get control back
before the write settles; they only await the returned task when they need
the durable result.

Ordering rules:
    - Writes touching the same entity are persisted in the order they were
      issued (one FIFO lock per entity).
    - Writes on different entities may complete in any order.
    - ``apply_staged`` persists a multi-entity change stage by stage; a
      later stage never starts before the previous one finished, and is
      skipped if it failed.

Failure policy: a failed background write is logged, recorded as a
``SyncFailure`` and rolled back locally, unless the entity has changed again
since (the newer local change is kept).
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Callable, Dict, List, Optional, Sequence, Set, Tuple

from ..exceptions import StorageError, TeamSyncException
from ..repositories.base import Collection
from ..repositories.gateway import PersistenceGateway
from ..schemas.common import WireModel

logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    SCHEDULES = "schedules"
    DOCS = "docs"
    FOLDERS = "folders"
    TASKS = "tasks"
    ACTIVITIES = "activities"
    USERS = "users"


class MutationOp(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Mutation:
    """One entity-level change. ``entity`` is None only for deletes."""

    kind: EntityKind
    op: MutationOp
    entity_id: str
    entity: Optional[WireModel] = None
    prepend: bool = False

    @classmethod
    def create(cls, kind: EntityKind, entity: WireModel, prepend: bool = False) -> "Mutation":
        return cls(kind, MutationOp.CREATE, entity.id, entity, prepend)

    @classmethod
    def update(cls, kind: EntityKind, entity: WireModel) -> "Mutation":
        return cls(kind, MutationOp.UPDATE, entity.id, entity)

    @classmethod
    def delete(cls, kind: EntityKind, entity_id: str) -> "Mutation":
        return cls(kind, MutationOp.DELETE, entity_id)


@dataclass
class SyncFailure:
    """A background write that did not reach the store."""

    mutation: Mutation
    error: Exception
    rolled_back: bool


@dataclass
class _Applied:
    """Local change bookkeeping, kept until the write settles."""

    mutation: Mutation
    before: Optional[WireModel]
    before_index: int
    after: Optional[WireModel]


class _StageSkipped(StorageError):
    def __init__(self):
        super().__init__("Skipped: an earlier stage of the same operation failed")


SyncErrorCallback = Callable[[SyncFailure], None]


@dataclass
class _LockSlot:
    """Per-entity write lock plus the number of writes holding or awaiting it."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


@dataclass
class _Bookkeeping:
    locks: Dict[Tuple[EntityKind, str], _LockSlot] = field(default_factory=dict)
    pending: Set[asyncio.Task] = field(default_factory=set)


class EntityStore:
    """Ordered, id-keyed collections of every entity kind.

    Public methods:
        all / get            -- read the local collections
        apply_optimistic     -- local change now, background persist
        apply_staged         -- several local changes now, staged persist
        insert_local         -- local-only insert (for already durable entities)
        reconcile            -- replace a collection wholesale
        load                 -- fetch every collection for a user and reconcile
        flush                -- await all in-flight writes
        teardown             -- drop all state at session end
    """

    def __init__(self, gateway: PersistenceGateway, on_sync_error: Optional[SyncErrorCallback] = None):
        self.gateway = gateway
        self.on_sync_error = on_sync_error
        self.sync_failures: List[SyncFailure] = []
        self._collections: Dict[EntityKind, Dict[str, WireModel]] = {kind: {} for kind in EntityKind}
        self._book = _Bookkeeping()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def all(self, kind: EntityKind) -> List[WireModel]:
        return list(self._collections[kind].values())

    def get(self, kind: EntityKind, entity_id: str) -> Optional[WireModel]:
        return self._collections[kind].get(entity_id)

    @property
    def pending_writes(self) -> int:
        return len(self._book.pending)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def apply_optimistic(self, mutation: Mutation) -> asyncio.Task:
        """Apply ``mutation`` locally and dispatch its write without awaiting it."""
        applied = self._apply_local(mutation)
        return self._dispatch(self._persist_stages([[applied]]))

    def apply_staged(self, stages: Sequence[Sequence[Mutation]]) -> asyncio.Task:
        """Apply every mutation locally in one step, then persist stage by stage.

        Mutations inside a stage are written concurrently. If any write in a
        stage fails, later stages are not written and their local changes
        are rolled back. The task resolves to True when every stage succeeded.
        """
        applied_stages = [[self._apply_local(m) for m in stage] for stage in stages]
        return self._dispatch(self._persist_stages(applied_stages))

    def insert_local(
        self,
        kind: EntityKind,
        entity: WireModel,
        prepend: bool = False,
        limit: Optional[int] = None,
    ) -> None:
        """Insert an entity that is already durable. No write is issued."""
        self._apply_local(Mutation.create(kind, entity, prepend=prepend))
        if limit is not None and len(self._collections[kind]) > limit:
            kept = list(self._collections[kind].items())
            kept = kept[:limit] if prepend else kept[-limit:]
            self._collections[kind] = dict(kept)

    def reconcile(self, kind: EntityKind, fresh: Sequence[WireModel]) -> None:
        """Replace a collection wholesale after a bulk fetch."""
        self._collections[kind] = {entity.id: entity for entity in fresh}

    async def load(self, user_id: str) -> None:
        """Fetch every collection in parallel and reconcile. Tasks are limited to ``user_id``."""
        g = self.gateway
        schedules, docs, folders, tasks, activities, users = await asyncio.gather(
            g.schedules.list(),
            g.docs.list(),
            g.folders.list(),
            g.tasks.list_for_user(user_id),
            g.activities.list(),
            g.users.list(),
        )
        self.reconcile(EntityKind.SCHEDULES, schedules)
        self.reconcile(EntityKind.DOCS, docs)
        self.reconcile(EntityKind.FOLDERS, folders)
        self.reconcile(EntityKind.TASKS, tasks)
        self.reconcile(EntityKind.ACTIVITIES, activities)
        self.reconcile(EntityKind.USERS, users)
        logger.info(
            "Entity store loaded",
            extra={"docs": len(docs), "folders": len(folders), "tasks": len(tasks), "schedules": len(schedules)},
        )

    async def flush(self) -> None:
        """Wait until every dispatched write has settled."""
        while self._book.pending:
            await asyncio.gather(*list(self._book.pending))

    def teardown(self) -> None:
        """Drop collections and bookkeeping. In-flight writes keep running."""
        if self._book.pending:
            logger.warning("Tearing down entity store with writes in flight", extra={"pending": len(self._book.pending)})
        self._collections = {kind: {} for kind in EntityKind}
        self.sync_failures = []
        self._book = _Bookkeeping()

    # ------------------------------------------------------------------
    # Local application
    # ------------------------------------------------------------------

    def _apply_local(self, mutation: Mutation) -> _Applied:
        coll = self._collections[mutation.kind]
        before = coll.get(mutation.entity_id)
        before_index = list(coll).index(mutation.entity_id) if before is not None else -1

        if mutation.op == MutationOp.DELETE:
            coll.pop(mutation.entity_id, None)
        elif mutation.op == MutationOp.CREATE and mutation.prepend:
            rest = {k: v for k, v in coll.items() if k != mutation.entity_id}
            self._collections[mutation.kind] = {mutation.entity_id: mutation.entity, **rest}
        else:
            coll[mutation.entity_id] = mutation.entity

        return _Applied(
            mutation=mutation,
            before=before,
            before_index=before_index,
            after=self._collections[mutation.kind].get(mutation.entity_id),
        )

    def _rollback(self, applied: _Applied) -> bool:
        """Undo a local change if nothing newer replaced it. Returns True when undone."""
        kind = applied.mutation.kind
        entity_id = applied.mutation.entity_id
        current = self._collections[kind].get(entity_id)
        if current is not applied.after:
            return False

        if applied.before is None:
            self._collections[kind].pop(entity_id, None)
            return True

        items = [(k, v) for k, v in self._collections[kind].items() if k != entity_id]
        index = applied.before_index if 0 <= applied.before_index <= len(items) else len(items)
        items.insert(index, (entity_id, applied.before))
        self._collections[kind] = dict(items)
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _dispatch(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._book.pending.add(task)
        task.add_done_callback(self._book.pending.discard)
        return task

    @asynccontextmanager
    async def _entity_lock(self, kind: EntityKind, entity_id: str) -> AsyncIterator[None]:
        """Hold the entity's FIFO lock. The slot is dropped once no write uses it."""
        book = self._book
        key = (kind, entity_id)
        slot = book.locks.get(key)
        if slot is None:
            slot = book.locks[key] = _LockSlot()
        slot.users += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.users -= 1
            if slot.users == 0 and book.locks.get(key) is slot:
                del book.locks[key]

    def _collection_for(self, kind: EntityKind) -> Collection:
        return getattr(self.gateway, kind.value)

    async def _write(self, mutation: Mutation) -> None:
        collection = self._collection_for(mutation.kind)
        if mutation.op == MutationOp.CREATE:
            await collection.create(mutation.entity)
        elif mutation.op == MutationOp.UPDATE:
            await collection.update(mutation.entity)
        else:
            await collection.delete(mutation.entity_id)

    async def _persist(self, applied: _Applied) -> bool:
        # Lock acquisition order equals dispatch order, so same-entity
        # writes reach the store in issue order.
        async with self._entity_lock(applied.mutation.kind, applied.mutation.entity_id):
            try:
                await self._write(applied.mutation)
                return True
            except TeamSyncException as e:
                self._record_failure(applied, e)
                return False

    async def _persist_stages(self, stages: List[List[_Applied]]) -> bool:
        for position, stage in enumerate(stages):
            results = await asyncio.gather(*(self._persist(applied) for applied in stage))
            if not all(results):
                for skipped_stage in stages[position + 1:]:
                    for applied in skipped_stage:
                        self._record_failure(applied, _StageSkipped())
                return False
        return True

    def _record_failure(self, applied: _Applied, error: Exception) -> None:
        rolled_back = self._rollback(applied)
        failure = SyncFailure(mutation=applied.mutation, error=error, rolled_back=rolled_back)
        self.sync_failures.append(failure)
        logger.error(
            "Background write failed",
            extra={
                "kind": applied.mutation.kind.value,
                "op": applied.mutation.op.value,
                "entity_id": applied.mutation.entity_id,
                "error": str(error),
                "rolled_back": rolled_back,
            },
        )
        if self.on_sync_error is not None:
            self.on_sync_error(failure)
