"""Business logic services."""

from .activity_service import ActivityFeed
from .assist_service import AssistService
from .context import WorkspaceContext
from .entity_store import EntityKind, EntityStore, Mutation
from .session_service import SessionManager, SessionRegistry
from .workspace_service import WorkspaceService

__all__ = [
    "ActivityFeed",
    "AssistService",
    "EntityKind",
    "EntityStore",
    "Mutation",
    "SessionManager",
    "SessionRegistry",
    "WorkspaceContext",
    "WorkspaceService",
]
