"""Pydantic schemas for stored entities and API payloads."""

from .common import Category, Priority, Role, new_id, utcnow
from .activity import Activity, ActivityView
from .document import Document, DocumentCreate, DocumentRename, DocumentUpdate
from .folder import Folder, FolderCreate, FolderRename
from .schedule import ScheduleEvent, ScheduleCreate, ScheduleType
from .task import Task, TaskCreate
from .user import User, UserPublic
from .workspace import WorkspaceTree, FolderNode, FolderDeleteResult

__all__ = [
    "Category", "Priority", "Role", "new_id", "utcnow",
    "Activity", "ActivityView",
    "Document", "DocumentCreate", "DocumentRename", "DocumentUpdate",
    "Folder", "FolderCreate", "FolderRename",
    "ScheduleEvent", "ScheduleCreate", "ScheduleType",
    "Task", "TaskCreate",
    "User", "UserPublic",
    "WorkspaceTree", "FolderNode", "FolderDeleteResult",
]
