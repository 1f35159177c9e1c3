"""Authentication and profile endpoints.

    POST /api/auth/register  -- create account (first account becomes Admin)
    POST /api/auth/login     -- authenticate, open a session, receive a JWT
    POST /api/auth/logout    -- flush pending writes and close the session
    GET  /api/auth/me        -- current user
    PUT  /api/auth/profile   -- change name, password or id (re-issues the token)
"""

import logging

from fastapi import APIRouter, Depends

from ..core.auth import get_registry, issue_token, require_session
from ..schemas.common import Role
from ..schemas.user import LoginRequest, ProfileUpdate, RegisterRequest, TokenResponse, UserPublic
from ..services.session_service import SessionManager, SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=UserPublic, status_code=201)
async def register(body: RegisterRequest, registry: SessionRegistry = Depends(get_registry)):
    """Open sign-up always creates a Member; Admins add other Admins via /api/members."""
    user = await registry.register(body.model_copy(update={"role": Role.MEMBER}))
    return user.public()


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, registry: SessionRegistry = Depends(get_registry)):
    session = await registry.login(body.id, body.password)
    user = session.current_user
    return TokenResponse(access_token=issue_token(user), user=user.public())


@router.post("/logout", status_code=204)
async def logout(
    session: SessionManager = Depends(require_session),
    registry: SessionRegistry = Depends(get_registry),
):
    await registry.logout(session.current_user.id)


@router.get("/me", response_model=UserPublic)
async def me(session: SessionManager = Depends(require_session)):
    return session.current_user.public()


@router.put("/profile", response_model=TokenResponse)
async def update_profile(body: ProfileUpdate, session: SessionManager = Depends(require_session)):
    """Apply a profile change. The returned token carries the (possibly new) user id."""
    user = await session.update_profile(body)
    return TokenResponse(access_token=issue_token(user), user=user.public())
