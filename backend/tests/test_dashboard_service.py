"""Dashboard summary tests."""

from datetime import date, datetime, timedelta, timezone

import pytest

from teamsync.schemas.common import Category
from teamsync.schemas.schedule import ScheduleCreate
from teamsync.services.context import WorkspaceContext


@pytest.fixture()
def ctx(sql_gateway, alice):
    return WorkspaceContext(sql_gateway, lambda: alice)


class TestDashboard:
    @pytest.mark.asyncio
    async def test_summary(self, ctx, alice, bob):
        today = date(2024, 3, 4)
        await ctx.schedules.add_schedule(alice, ScheduleCreate(title="Standup", start_date=today, end_date=today))
        await ctx.schedules.add_schedule(bob, ScheduleCreate(title="Bob's", start_date=today, end_date=today))
        mine = await ctx.workspace.create_document(Category.PERSONAL, title="Mine")
        team = await ctx.workspace.create_document(Category.TEAM, title="Team", author=bob)
        await ctx.workspace.create_document(Category.PERSONAL, title="Bob private", author=bob)
        ctx.workspace.update_document(mine.id, content="touched")
        ctx.tasks.add_task(alice, "Open task")

        later = datetime.now(timezone.utc) + timedelta(minutes=5, seconds=30)
        summary = ctx.dashboard.summary(alice, today=today, now=later)

        assert [e.title for e in summary.today_schedules] == ["Standup"]
        assert [d.id for d in summary.recent_docs] == [mine.id, team.id]
        assert summary.open_task_count == 1
        assert summary.activities[0].time_label == "5 minutes ago"
        await ctx.store.flush()
