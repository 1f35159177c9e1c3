"""API routes."""

from .activities import dashboard_router, router as activities_router
from .assist import router as assist_router
from .auth_routes import router as auth_router
from .members import router as members_router
from .schedules import router as schedules_router
from .tasks import router as tasks_router
from .workspace import router as workspace_router

__all__ = [
    "activities_router",
    "assist_router",
    "auth_router",
    "dashboard_router",
    "members_router",
    "schedules_router",
    "tasks_router",
    "workspace_router",
]
