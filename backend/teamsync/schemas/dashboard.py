"""Dashboard summary schema."""

from typing import List

from pydantic import BaseModel

from .activity import ActivityView
from .document import Document
from .schedule import ScheduleEvent
from .task import Task


class DashboardSummary(BaseModel):
    today_schedules: List[ScheduleEvent] = []
    recent_docs: List[Document] = []
    tasks: List[Task] = []
    open_task_count: int = 0
    activities: List[ActivityView] = []
