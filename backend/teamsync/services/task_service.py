"""Personal task list with the completion-log latch."""

import logging
from typing import List, Optional

from ..exceptions import TaskNotFoundError, ValidationError
from ..schemas.common import Priority
from ..schemas.task import DEFAULT_DUE_DATE, Task
from ..schemas.user import User
from .activity_service import ACTION_TASK_COMPLETED, ActivityFeed
from .entity_store import EntityKind, EntityStore, Mutation

logger = logging.getLogger(__name__)


class TaskService:
    """Add, toggle and delete tasks.

    Toggling a task to completed for the first time records a feed entry and
    sets ``has_logged_completion``; later completions never log again.
    """

    def __init__(self, store: EntityStore, feed: ActivityFeed):
        self.store = store
        self.feed = feed

    def list_tasks(self, user_id: Optional[str] = None) -> List[Task]:
        tasks = self.store.all(EntityKind.TASKS)
        if user_id is None:
            return tasks
        return [t for t in tasks if t.user_id == user_id]

    def open_count(self, user_id: str) -> int:
        return sum(1 for t in self.list_tasks(user_id) if not t.completed)

    def get_task(self, task_id: str) -> Task:
        task = self.store.get(EntityKind.TASKS, task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def add_task(
        self,
        owner: User,
        title: str,
        priority: Priority = Priority.MEDIUM,
        due_date: str = DEFAULT_DUE_DATE,
    ) -> Task:
        title = title.strip()
        if not title:
            raise ValidationError("Task title cannot be empty", field="title")
        task = Task(user_id=owner.id, title=title, priority=priority, due_date=due_date)
        self.store.apply_optimistic(Mutation.create(EntityKind.TASKS, task))
        return task

    async def toggle_task(self, task_id: str, actor: User) -> Task:
        """Flip ``completed``; log the first completion only."""
        task = self.get_task(task_id)
        completing = not task.completed
        first_completion = completing and not task.has_logged_completion

        changes = {"completed": completing}
        if first_completion:
            changes["has_logged_completion"] = True
        updated = task.model_copy(update=changes)
        self.store.apply_optimistic(Mutation.update(EntityKind.TASKS, updated))

        if first_completion:
            await self.feed.record(actor.name, ACTION_TASK_COMPLETED, task.title)
        return updated

    def delete_task(self, task_id: str) -> bool:
        existed = self.store.get(EntityKind.TASKS, task_id) is not None
        self.store.apply_optimistic(Mutation.delete(EntityKind.TASKS, task_id))
        return existed
