"""Activity feed and dashboard endpoints (read-only)."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..core.auth import require_session
from ..schemas.activity import ActivityView
from ..schemas.dashboard import DashboardSummary
from ..services.session_service import SessionManager

router = APIRouter(prefix="/api/activities", tags=["activities"])
dashboard_router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=List[ActivityView])
async def list_activities(
    limit: Optional[int] = Query(None, ge=1),
    session: SessionManager = Depends(require_session),
):
    """Feed entries, newest first, with relative time labels."""
    return session.context.feed.render(limit=limit)


@dashboard_router.get("", response_model=DashboardSummary)
async def dashboard(session: SessionManager = Depends(require_session)):
    return session.context.dashboard.summary(session.current_user)
