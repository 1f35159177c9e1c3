"""Task schemas."""

from pydantic import BaseModel, Field

from .common import Priority, WireModel, new_id

DEFAULT_DUE_DATE = "Today"


class Task(WireModel):
    """A personal to-do item.

    ``has_logged_completion`` is a one-way latch: set on the first
    transition to completed and never cleared.
    """
    id: str = Field(default_factory=new_id)
    user_id: str
    title: str
    due_date: str = DEFAULT_DUE_DATE
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    has_logged_completion: bool = False


class TaskCreate(BaseModel):
    title: str
    priority: Priority = Priority.MEDIUM
    due_date: str = DEFAULT_DUE_DATE
