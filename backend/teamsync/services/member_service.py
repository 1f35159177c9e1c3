"""Member administration. Adding and removing members is Admin-only."""

import logging
from typing import List

from ..core.passwords import hash_password
from ..exceptions import ForbiddenError, ValidationError
from ..schemas.common import Role
from ..schemas.user import RegisterRequest, User, UserPublic
from .entity_store import EntityKind, EntityStore, Mutation

logger = logging.getLogger(__name__)


def _require_admin(actor: User) -> None:
    if actor.role != Role.ADMIN:
        raise ForbiddenError("Admin access required")


class MemberService:
    def __init__(self, store: EntityStore):
        self.store = store

    def list_members(self) -> List[UserPublic]:
        return [u.public() for u in self.store.all(EntityKind.USERS)]

    def add_member(self, actor: User, request: RegisterRequest) -> User:
        _require_admin(actor)
        if self.store.get(EntityKind.USERS, request.id) is not None:
            raise ValidationError(f"User id already taken: {request.id}", field="id")
        user = User(
            id=request.id,
            name=request.name,
            role=request.role,
            password_hash=hash_password(request.password),
        )
        self.store.apply_optimistic(Mutation.create(EntityKind.USERS, user))
        logger.info("Member added", extra={"member_id": user.id, "role": user.role.value})
        return user

    def delete_member(self, actor: User, user_id: str) -> bool:
        """Remove a member. Returns False if the member was already gone."""
        _require_admin(actor)
        if user_id == actor.id:
            raise ValidationError("Admins cannot delete their own account", field="user_id")
        existed = self.store.get(EntityKind.USERS, user_id) is not None
        self.store.apply_optimistic(Mutation.delete(EntityKind.USERS, user_id))
        if existed:
            logger.info("Member deleted", extra={"member_id": user_id})
        return existed
