"""Schedule endpoints: the shared team calendar."""

from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from ..core.auth import require_session
from ..schemas.schedule import ScheduleCreate, ScheduleEvent
from ..services.session_service import SessionManager

router = APIRouter(prefix="/api/schedules", tags=["schedules"])


@router.get("", response_model=List[ScheduleEvent])
async def list_schedules(session: SessionManager = Depends(require_session)):
    return session.context.schedules.list_schedules()


@router.post("", response_model=ScheduleEvent, status_code=201)
async def add_schedule(body: ScheduleCreate, session: SessionManager = Depends(require_session)):
    return await session.context.schedules.add_schedule(session.current_user, body)


@router.get("/agenda", response_model=List[ScheduleEvent])
async def agenda(
    day: Optional[date] = Query(None, description="Day to show (defaults to today)"),
    session: SessionManager = Depends(require_session),
):
    """Entries whose inclusive date range covers ``day``, earliest start time first."""
    return session.context.schedules.agenda_for(day or date.today())


@router.get("/month/{year}/{month}", response_model=Dict[date, List[ScheduleEvent]])
async def month(year: int, month: int, session: SessionManager = Depends(require_session)):
    return session.context.schedules.month_grid(year, month)
