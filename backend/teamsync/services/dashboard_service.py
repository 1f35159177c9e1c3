"""Dashboard read model assembled from the entity store."""

from datetime import date, datetime, timezone
from typing import List, Optional

from ..schemas.common import Category
from ..schemas.dashboard import DashboardSummary
from ..schemas.document import Document
from ..schemas.user import User
from .activity_service import ActivityFeed
from .entity_store import EntityKind, EntityStore
from .schedule_service import ScheduleService
from .task_service import TaskService

RECENT_DOCS_LIMIT = 5
FEED_PREVIEW_LIMIT = 10


class DashboardService:
    def __init__(self, store: EntityStore, tasks: TaskService, schedules: ScheduleService, feed: ActivityFeed):
        self.store = store
        self.tasks = tasks
        self.schedules = schedules
        self.feed = feed

    def recent_documents(self, user: User, limit: int = RECENT_DOCS_LIMIT) -> List[Document]:
        """Documents the user can see (own or Team), most recently updated first."""
        visible = [
            d for d in self.store.all(EntityKind.DOCS)
            if d.author_id == user.id or d.category == Category.TEAM
        ]
        visible.sort(key=lambda d: d.updated_at, reverse=True)
        return visible[:limit]

    def summary(self, user: User, today: Optional[date] = None, now: Optional[datetime] = None) -> DashboardSummary:
        now = now or datetime.now(timezone.utc)
        today = today or now.date()
        return DashboardSummary(
            today_schedules=self.schedules.today_for_user(user.id, today),
            recent_docs=self.recent_documents(user),
            tasks=self.tasks.list_tasks(user.id),
            open_task_count=self.tasks.open_count(user.id),
            activities=self.feed.render(now=now, limit=FEED_PREVIEW_LIMIT),
        )
