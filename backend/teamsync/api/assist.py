"""Writing assistant endpoints."""

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from ..core.auth import require_session
from ..core.config import settings
from ..schemas.assist import AssistRequest, AssistResponse
from ..services.session_service import SessionManager

router = APIRouter(prefix="/api/assist", tags=["assist"])


@router.get("/status")
async def assist_status(session: SessionManager = Depends(require_session)):
    return {"configured": session.context.assist.is_configured(), "model": settings.assist_model}


@router.post("", response_model=AssistResponse)
async def transform(body: AssistRequest, session: SessionManager = Depends(require_session)):
    """Summarize, fix or expand free text. Never fails: errors come back as a message."""
    result = await run_in_threadpool(session.context.assist.transform, body.text, body.command)
    return AssistResponse(result=result, model=settings.assist_model)


@router.get("/insight", response_model=AssistResponse)
async def team_insight(session: SessionManager = Depends(require_session)):
    """Short briefing over every schedule on the team calendar."""
    schedules = session.context.schedules.list_schedules()
    result = await run_in_threadpool(session.context.assist.team_insight, schedules)
    return AssistResponse(result=result, model=settings.assist_model)
