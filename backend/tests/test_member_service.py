"""Member administration tests."""

import pytest

from teamsync.core.passwords import verify_password
from teamsync.exceptions import ForbiddenError, ValidationError
from teamsync.schemas.common import Role
from teamsync.schemas.user import RegisterRequest
from teamsync.services.context import WorkspaceContext


@pytest.fixture()
def ctx(sql_gateway, alice):
    return WorkspaceContext(sql_gateway, lambda: alice)


def _request(user_id="carol") -> RegisterRequest:
    return RegisterRequest(id=user_id, name=user_id.title(), password="secret123")


class TestMembers:
    @pytest.mark.asyncio
    async def test_admin_adds_member_with_hashed_password(self, sql_gateway, ctx, alice):
        member = ctx.members.add_member(alice, _request())
        await ctx.store.flush()

        stored = await sql_gateway.users.get("carol")
        assert stored.role == Role.MEMBER
        assert verify_password("secret123", stored.password_hash)
        assert [m.id for m in ctx.members.list_members()] == [member.id]

    @pytest.mark.asyncio
    async def test_member_cannot_add_or_delete(self, ctx, bob):
        with pytest.raises(ForbiddenError):
            ctx.members.add_member(bob, _request())
        with pytest.raises(ForbiddenError):
            ctx.members.delete_member(bob, "alice")

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_self(self, ctx, alice):
        with pytest.raises(ValidationError):
            ctx.members.delete_member(alice, "alice")

    @pytest.mark.asyncio
    async def test_duplicate_member_rejected(self, ctx, alice):
        ctx.members.add_member(alice, _request())
        with pytest.raises(ValidationError):
            ctx.members.add_member(alice, _request())
        await ctx.store.flush()

    @pytest.mark.asyncio
    async def test_delete_member(self, sql_gateway, ctx, alice):
        ctx.members.add_member(alice, _request())
        assert ctx.members.delete_member(alice, "carol") is True
        assert ctx.members.delete_member(alice, "carol") is False
        await ctx.store.flush()
        assert await sql_gateway.users.list() == []


class TestPasswords:
    def test_missing_or_malformed_hash_never_matches(self):
        assert verify_password("x", None) is False
        assert verify_password("x", "not-a-bcrypt-hash") is False
