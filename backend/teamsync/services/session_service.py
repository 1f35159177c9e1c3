"""Session and profile management.

A ``SessionManager`` holds the signed-in user and that user's
``WorkspaceContext``. Logging in loads every collection; logging out waits
for in-flight writes and drops all local state.

Changing the user id is a migration: the user record is re-keyed, every
owned record is rewritten to the new id, the store is reloaded and
listeners are told ``(old_id, new_id)``.
"""

import logging
from typing import Callable, Dict, List, Optional

from ..core.passwords import MIN_PASSWORD_LENGTH, hash_password, verify_password
from ..exceptions import AuthenticationError, ValidationError
from ..repositories.gateway import PersistenceGateway
from ..schemas.common import Role
from ..schemas.user import ProfileUpdate, RegisterRequest, User
from .context import WorkspaceContext
from .entity_store import EntityKind

logger = logging.getLogger(__name__)

IdChangeListener = Callable[[str, str], None]


class SessionManager:
    """One user session over a shared gateway.

    Public methods:
        register        -- create an account (first account becomes Admin)
        login / logout  -- open or close the session's workspace context
        update_profile  -- name, password, or id (with ownership migration)
        add_listener    -- subscribe to id changes
    """

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway
        self._user: Optional[User] = None
        self._context: Optional[WorkspaceContext] = None
        self._listeners: List[IdChangeListener] = []

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    @property
    def context(self) -> WorkspaceContext:
        if self._context is None:
            raise AuthenticationError("Not signed in")
        return self._context

    @property
    def is_active(self) -> bool:
        return self._context is not None

    def add_listener(self, listener: IdChangeListener) -> None:
        self._listeners.append(listener)

    async def register(self, request: RegisterRequest) -> User:
        """Create an account. Does not sign it in."""
        users = await self.gateway.users.list()
        if any(u.id == request.id for u in users):
            raise ValidationError(f"User id already taken: {request.id}", field="id")

        role = Role.ADMIN if not users else request.role
        user = User(id=request.id, name=request.name, role=role, password_hash=hash_password(request.password))
        stored = await self.gateway.users.create(user)
        if self._context is not None:
            self._context.store.insert_local(EntityKind.USERS, stored)
        logger.info("User registered", extra={"user_id": stored.id, "role": role.value})
        return stored

    async def login(self, user_id: str, password: str) -> User:
        user = await self.gateway.users.get(user_id)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Failed login", extra={"user_id": user_id})
            raise AuthenticationError("Invalid user id or password")

        if self._context is not None:
            await self.logout()

        self._user = user
        self._context = WorkspaceContext(self.gateway, lambda: self._user)
        await self._context.open(user.id)
        logger.info("User logged in", extra={"user_id": user.id})
        return user

    async def logout(self) -> None:
        if self._context is not None:
            await self._context.close()
        if self._user is not None:
            logger.info("User logged out", extra={"user_id": self._user.id})
        self._context = None
        self._user = None

    async def update_profile(self, update: ProfileUpdate) -> User:
        user = self._user
        if user is None or self._context is None:
            raise AuthenticationError("Not signed in")

        changes: Dict[str, object] = {}
        if update.name is not None:
            name = update.name.strip()
            if not name:
                raise ValidationError("Name cannot be empty", field="name")
            changes["name"] = name
        if update.password is not None:
            if len(update.password) < MIN_PASSWORD_LENGTH:
                raise ValidationError(
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
                )
            changes["password_hash"] = hash_password(update.password)

        new_id = update.id.strip() if update.id is not None else user.id
        if not new_id:
            raise ValidationError("User id cannot be empty", field="id")

        if new_id == user.id:
            if not changes:
                return user
            updated = user.model_copy(update=changes)
            await self.gateway.users.update(updated)
            self._context.store.insert_local(EntityKind.USERS, updated)
            self._user = updated
            logger.info("Profile updated", extra={"user_id": user.id, "fields": sorted(changes)})
            return updated

        return await self._change_id(user, new_id, changes)

    async def _change_id(self, user: User, new_id: str, changes: Dict[str, object]) -> User:
        if await self.gateway.users.get(new_id) is not None:
            raise ValidationError(f"User id already taken: {new_id}", field="id")

        old_id = user.id
        # Pending writes may still carry the old owner id.
        await self._context.store.flush()

        migrated = user.model_copy(update={**changes, "id": new_id})
        await self.gateway.users.create(migrated)
        await self.gateway.users.delete(old_id)
        count = await self.gateway.migrate_owner(old_id, new_id)

        self._user = migrated
        await self._context.store.load(new_id)
        logger.info("User id changed", extra={"old_id": old_id, "new_id": new_id, "records": count})

        for listener in list(self._listeners):
            listener(old_id, new_id)
        return migrated


class SessionRegistry:
    """Signed-in sessions keyed by user id, for the HTTP layer."""

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway
        self._sessions: Dict[str, SessionManager] = {}

    def get(self, user_id: str) -> Optional[SessionManager]:
        return self._sessions.get(user_id)

    def __len__(self) -> int:
        return len(self._sessions)

    async def register(self, request: RegisterRequest) -> User:
        return await SessionManager(self.gateway).register(request)

    async def login(self, user_id: str, password: str) -> SessionManager:
        session = self._sessions.get(user_id)
        if session is None:
            session = SessionManager(self.gateway)
            session.add_listener(self._rekey)
        await session.login(user_id, password)
        self._sessions[user_id] = session
        return session

    async def logout(self, user_id: str) -> bool:
        session = self._sessions.pop(user_id, None)
        if session is None:
            return False
        await session.logout()
        return True

    async def close_all(self) -> None:
        for user_id in list(self._sessions):
            await self.logout(user_id)

    def _rekey(self, old_id: str, new_id: str) -> None:
        session = self._sessions.pop(old_id, None)
        if session is not None:
            self._sessions[new_id] = session
