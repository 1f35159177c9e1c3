"""Schedule management: team calendar entries and per-day agendas."""

import calendar
import logging
from datetime import date
from typing import Dict, List, Union

from ..schemas.schedule import ScheduleCreate, ScheduleEvent
from ..schemas.user import User
from .activity_service import ACTION_SCHEDULE_CREATED, ActivityFeed
from .entity_store import EntityKind, EntityStore, Mutation

logger = logging.getLogger(__name__)

DayLike = Union[date, str]


def _as_date(day: DayLike) -> date:
    return day if isinstance(day, date) else date.fromisoformat(day)


def _start_key(event: ScheduleEvent) -> str:
    return event.start_time or "00:00"


class ScheduleService:
    """Calendar operations over the session's schedule collection."""

    def __init__(self, store: EntityStore, feed: ActivityFeed):
        self.store = store
        self.feed = feed

    def list_schedules(self) -> List[ScheduleEvent]:
        return self.store.all(EntityKind.SCHEDULES)

    async def add_schedule(self, actor: User, draft: ScheduleCreate) -> ScheduleEvent:
        """Add an entry at the top of the list and record a feed entry."""
        event = ScheduleEvent(user_id=actor.id, user_name=actor.name, **draft.model_dump())
        self.store.apply_optimistic(Mutation.create(EntityKind.SCHEDULES, event, prepend=True))
        logger.info("Schedule created", extra={"schedule_id": event.id, "type": event.type.value})

        await self.feed.record(actor.name, ACTION_SCHEDULE_CREATED, event.title)
        return event

    def agenda_for(self, day: DayLike) -> List[ScheduleEvent]:
        """Events whose inclusive date range contains ``day``, earliest start first."""
        target = _as_date(day)
        events = [e for e in self.list_schedules() if e.covers(target)]
        return sorted(events, key=_start_key)

    def today_for_user(self, user_id: str, today: DayLike) -> List[ScheduleEvent]:
        return [e for e in self.agenda_for(today) if e.user_id == user_id]

    def month_grid(self, year: int, month: int) -> Dict[date, List[ScheduleEvent]]:
        """Agenda for every day of a month, keyed by date."""
        days_in_month = calendar.monthrange(year, month)[1]
        return {
            date(year, month, d): self.agenda_for(date(year, month, d))
            for d in range(1, days_in_month + 1)
        }
