"""Per-session bundle of the entity store and every service built on it."""

import logging
from typing import Callable, Optional

from ..repositories.gateway import PersistenceGateway
from ..schemas.user import User
from .activity_service import ActivityFeed
from .assist_service import AssistService
from .dashboard_service import DashboardService
from .entity_store import EntityStore, SyncErrorCallback
from .member_service import MemberService
from .schedule_service import ScheduleService
from .task_service import TaskService
from .workspace_service import WorkspaceService

logger = logging.getLogger(__name__)


class WorkspaceContext:
    """Owns one ``EntityStore``. Created at login, closed at logout."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        current_user: Callable[[], Optional[User]],
        on_sync_error: Optional[SyncErrorCallback] = None,
    ):
        self.store = EntityStore(gateway, on_sync_error=on_sync_error)
        self.feed = ActivityFeed(self.store)
        self.workspace = WorkspaceService(self.store, self.feed, current_user)
        self.tasks = TaskService(self.store, self.feed)
        self.schedules = ScheduleService(self.store, self.feed)
        self.members = MemberService(self.store)
        self.dashboard = DashboardService(self.store, self.tasks, self.schedules, self.feed)
        self.assist = AssistService(self.workspace)

    async def open(self, user_id: str) -> None:
        await self.store.load(user_id)

    async def close(self) -> None:
        await self.store.flush()
        self.store.teardown()
