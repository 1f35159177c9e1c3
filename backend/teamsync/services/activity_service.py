"""Activity feed recorder: append-only log of notable workspace actions.

Entries are immutable. Only three actions produce an entry: a schedule is
created, a document is created, a task is completed for the first time.
Document edits, folder operations and task creation never do.

Recording never raises: a storage failure is logged and ``None`` is returned
so the action that triggered the entry is not affected.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from ..exceptions import StorageError
from ..schemas.activity import Activity, ActivityView
from .entity_store import EntityKind, EntityStore

logger = logging.getLogger(__name__)

ACTION_SCHEDULE_CREATED = "Schedule created"
ACTION_DOCUMENT_CREATED = "Document created"
ACTION_TASK_COMPLETED = "Task completed"


class ActivityFeed:
    """Records feed entries through the gateway and mirrors them locally."""

    def __init__(self, store: EntityStore):
        self.store = store

    @property
    def limit(self) -> int:
        return self.store.gateway.activities.limit

    async def record(self, user: str, action: str, target: str) -> Optional[Activity]:
        """Append an entry and prepend the stored copy to the local feed.

        The gateway stamps ``id`` and ``time``; the local feed shows the
        returned entry, never a locally built one.
        """
        try:
            entry = await self.store.gateway.activities.append(user=user, action=action, target=target)
        except StorageError as e:
            logger.warning("Failed to record activity: %s", e, extra={"action": action, "target": target})
            return None
        self.store.insert_local(EntityKind.ACTIVITIES, entry, prepend=True, limit=self.limit)
        return entry

    def recent(self, limit: Optional[int] = None) -> List[Activity]:
        """Local feed, newest first."""
        entries = self.store.all(EntityKind.ACTIVITIES)
        return entries[: limit or self.limit]

    def render(self, now: Optional[datetime] = None, limit: Optional[int] = None) -> List[ActivityView]:
        now = now or datetime.now(timezone.utc)
        return [
            ActivityView(**entry.model_dump(), time_label=time_label(entry, now))
            for entry in self.recent(limit)
        ]


def time_label(entry: Activity, now: datetime) -> str:
    """Relative label for the feed ("just now", "5 minutes ago", ...).

    Entries whose ``time`` is not an ISO timestamp are shown verbatim.
    """
    try:
        stamp = datetime.fromisoformat(entry.time)
    except ValueError:
        return entry.time
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)

    seconds = int((now - stamp).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = hours // 24
    return f"{days} day{'s' if days != 1 else ''} ago"
