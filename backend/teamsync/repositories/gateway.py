"""Persistence gateway: one typed collection per entity kind over a record store.

The backend is chosen once, from configuration, by ``create_gateway``.
Nothing downstream of the gateway knows which backend is in use.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.engine import Engine

from ..core.config import Settings, StorageBackend
from ..database import build_engine
from ..exceptions import StorageError, ValidationError
from ..schemas.activity import Activity
from ..schemas.common import new_id, utcnow
from ..schemas.document import Document
from ..schemas.folder import Folder
from ..schemas.schedule import ScheduleEvent
from ..schemas.task import Task
from ..schemas.user import User
from .base import Collection, RecordStore
from .local_store import LocalRecordStore
from .seed import seed_records
from .sql_store import SqlRecordStore

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_LIMIT = 50


class ScheduleCollection(Collection[ScheduleEvent]):
    name = "schedules"
    model_class = ScheduleEvent


class DocumentCollection(Collection[Document]):
    name = "docs"
    model_class = Document


class FolderCollection(Collection[Folder]):
    name = "folders"
    model_class = Folder


class TaskCollection(Collection[Task]):
    name = "tasks"
    model_class = Task

    async def list_for_user(self, user_id: str) -> List[Task]:
        return [t for t in await self.list() if t.user_id == user_id]


class UserCollection(Collection[User]):
    name = "users"
    model_class = User

    async def get(self, user_id: str) -> Optional[User]:
        for user in await self.list():
            if user.id == user_id:
                return user
        return None


class ActivityLog(Collection[Activity]):
    """Append-only feed, newest first, capped at ``limit`` entries."""

    name = "activities"
    model_class = Activity

    def __init__(self, store: RecordStore, limit: int = DEFAULT_ACTIVITY_LIMIT):
        super().__init__(store)
        self.limit = limit

    async def list(self, order_by: str | None = None, descending: bool = True) -> List[Activity]:
        bodies = await self.store.list_records(self.name)
        if order_by:
            bodies = sorted(bodies, key=lambda b: str(b.get(order_by) or ""), reverse=descending)
        elif descending:
            bodies = list(reversed(bodies))
        return [Activity.from_record(b) for b in bodies[: self.limit]]

    async def append(self, user: str, action: str, target: str) -> Activity:
        """Stamp id and time, store, and prune the feed to ``limit`` entries."""
        entry = Activity(id=new_id(), user=user, action=action, target=target, time=utcnow().isoformat())
        stored = await self.create(entry)
        try:
            await self.store.prune(self.name, self.limit)
        except StorageError as e:
            # The entry is durable; an oversized feed is trimmed on the next append.
            logger.warning("Activity prune failed", extra={"error": str(e)})
        return stored

    async def update(self, entity: Activity) -> None:
        raise ValidationError("Activity entries are immutable")


class PersistenceGateway:
    """Uniform async CRUD over every collection the workspace uses.

    Attributes:
        schedules, docs, folders, tasks, users -- ``Collection`` instances
        activities                             -- the capped ``ActivityLog``
    """

    def __init__(self, store: RecordStore, activity_limit: int = DEFAULT_ACTIVITY_LIMIT):
        self.store = store
        self.schedules = ScheduleCollection(store)
        self.docs = DocumentCollection(store)
        self.folders = FolderCollection(store)
        self.tasks = TaskCollection(store)
        self.users = UserCollection(store)
        self.activities = ActivityLog(store, limit=activity_limit)

    def collections(self) -> Iterable[Collection]:
        return (self.schedules, self.docs, self.folders, self.tasks, self.activities, self.users)

    async def migrate_owner(self, old_id: str, new_id_: str) -> int:
        """Rewrite ownership references from ``old_id`` to ``new_id_``.

        Covers document authors and folder/task/schedule owners. Not
        transactional: each record is overwritten independently. Returns the
        number of records rewritten.
        """
        rewritten = 0
        for doc in await self.docs.list():
            if doc.author_id == old_id:
                await self.docs.update(doc.model_copy(update={"author_id": new_id_}))
                rewritten += 1
        for collection in (self.folders, self.tasks, self.schedules):
            for entity in await collection.list():
                if entity.user_id == old_id:
                    await collection.update(entity.model_copy(update={"user_id": new_id_}))
                    rewritten += 1
        logger.info("Migrated record ownership", extra={"old_id": old_id, "new_id": new_id_, "count": rewritten})
        return rewritten

    async def close(self) -> None:
        await self.store.close()


def create_gateway(settings: Settings, engine: Engine | None = None) -> PersistenceGateway:
    """Build the gateway for the configured storage backend."""
    if settings.storage_backend == StorageBackend.LOCAL:
        store: RecordStore = LocalRecordStore(
            settings.local_storage_dir,
            latency_ms=settings.local_storage_latency_ms,
            seed=seed_records if settings.seed_local_storage else None,
        )
        logger.info("Using local record store", extra={"directory": settings.local_storage_dir})
    else:
        store = SqlRecordStore(engine or build_engine(settings.database_url))
        logger.info("Using SQL record store")
    return PersistenceGateway(store, activity_limit=settings.activity_feed_limit)
