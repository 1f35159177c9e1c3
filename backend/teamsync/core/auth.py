"""FastAPI authentication dependencies.

Public interface:
    ``get_registry``    -- the app-wide ``SessionRegistry``
    ``require_session`` -- the caller's ``SessionManager`` or 401
    ``require_admin``   -- same, 403 unless the user is an Admin
    ``issue_token``     -- signed token for a user
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..exceptions import AuthenticationError, ForbiddenError, TeamSyncException
from ..schemas.common import Role
from ..schemas.user import User
from ..services.session_service import SessionManager, SessionRegistry
from .config import settings
from .logging_config import user_id_var
from .token_factory import create_token, decode_token

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def get_registry(request: Request) -> SessionRegistry:
    registry = getattr(request.app.state, "sessions", None)
    if registry is None:
        raise TeamSyncException("Session registry is not initialised")
    return registry


def issue_token(user: User) -> str:
    return create_token(
        subject=user.id,
        role=user.role.value,
        secret=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_hours=settings.token_expire_hours,
    )


async def require_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    registry: SessionRegistry = Depends(get_registry),
) -> SessionManager:
    """Resolve the bearer token to a live session.

    A valid token whose session was logged out (or predates a restart) is
    rejected like a bad token.
    """
    if credentials is None:
        raise AuthenticationError("Missing authentication token")

    payload = decode_token(credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    session = registry.get(payload.sub)
    if session is None or not session.is_active:
        raise AuthenticationError("Session expired, please log in again")

    user_id_var.set(payload.sub)
    return session


async def require_admin(session: SessionManager = Depends(require_session)) -> SessionManager:
    """Require the signed-in user to be an Admin. Raises 403 otherwise."""
    if session.current_user is None or session.current_user.role != Role.ADMIN:
        raise ForbiddenError("Admin access required")
    return session
