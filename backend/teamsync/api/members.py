"""Team member endpoints. Listing is open to every member; changes are Admin-only."""

from typing import List

from fastapi import APIRouter, Depends

from ..core.auth import require_admin, require_session
from ..schemas.user import RegisterRequest, UserPublic
from ..services.session_service import SessionManager

router = APIRouter(prefix="/api/members", tags=["members"])


@router.get("", response_model=List[UserPublic])
async def list_members(session: SessionManager = Depends(require_session)):
    return session.context.members.list_members()


@router.post("", response_model=UserPublic, status_code=201)
async def add_member(body: RegisterRequest, session: SessionManager = Depends(require_admin)):
    return session.context.members.add_member(session.current_user, body).public()


@router.delete("/{user_id}", status_code=204)
async def delete_member(user_id: str, session: SessionManager = Depends(require_admin)):
    session.context.members.delete_member(session.current_user, user_id)
