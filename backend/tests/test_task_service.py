"""Task tests: completion latch and personal lists."""

import pytest

from teamsync.exceptions import TaskNotFoundError, ValidationError
from teamsync.schemas.common import Priority
from teamsync.schemas.task import Task
from teamsync.services.activity_service import ACTION_TASK_COMPLETED
from teamsync.services.context import WorkspaceContext
from teamsync.services.entity_store import EntityKind


@pytest.fixture()
def ctx(sql_gateway, alice):
    return WorkspaceContext(sql_gateway, lambda: alice)


class TestCompletionLatch:
    @pytest.mark.asyncio
    async def test_three_toggles_log_one_entry(self, sql_gateway, ctx, alice):
        await sql_gateway.tasks.create(Task(id="t1", user_id="alice", title="Ship it"))
        await ctx.open("alice")
        before = len(ctx.store.all(EntityKind.ACTIVITIES))

        first = await ctx.tasks.toggle_task("t1", alice)
        assert first.completed is True
        assert first.has_logged_completion is True
        after_first = len(ctx.store.all(EntityKind.ACTIVITIES))

        second = await ctx.tasks.toggle_task("t1", alice)
        assert second.completed is False
        assert second.has_logged_completion is True

        third = await ctx.tasks.toggle_task("t1", alice)
        assert third.completed is True

        entries = ctx.store.all(EntityKind.ACTIVITIES)
        assert after_first == before + 1
        assert len(entries) == before + 1
        assert (entries[0].action, entries[0].target) == (ACTION_TASK_COMPLETED, "Ship it")

        await ctx.store.flush()
        [stored] = await sql_gateway.tasks.list()
        assert stored.completed is True
        assert stored.has_logged_completion is True
        assert len(await sql_gateway.activities.list()) == before + 1

    @pytest.mark.asyncio
    async def test_task_completed_before_latch_existed(self, sql_gateway, ctx, alice):
        await sql_gateway.store.insert("tasks", "t9", {
            "id": "t9", "userId": "alice", "title": "Legacy", "dueDate": "Today",
            "completed": False, "priority": "Low",
        })
        await ctx.open("alice")
        task = ctx.tasks.get_task("t9")
        assert task.has_logged_completion is False

        await ctx.tasks.toggle_task("t9", alice)

        assert len(ctx.feed.recent()) == 1


class TestTasks:
    @pytest.mark.asyncio
    async def test_add_task_does_not_record_activity(self, ctx, alice):
        task = ctx.tasks.add_task(alice, "  Write report  ", priority=Priority.HIGH)
        assert task.title == "Write report"
        assert ctx.tasks.open_count("alice") == 1
        await ctx.store.flush()
        assert ctx.feed.recent() == []

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, ctx, alice):
        with pytest.raises(ValidationError):
            ctx.tasks.add_task(alice, "   ")

    @pytest.mark.asyncio
    async def test_delete_and_lookup(self, ctx, alice):
        task = ctx.tasks.add_task(alice, "Temp")
        assert ctx.tasks.delete_task(task.id) is True
        with pytest.raises(TaskNotFoundError):
            ctx.tasks.get_task(task.id)
        await ctx.store.flush()
