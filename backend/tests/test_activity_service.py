"""Activity feed tests: recording, failure isolation, relative time labels."""

from datetime import datetime, timedelta, timezone

import pytest

from teamsync.exceptions import StorageError
from teamsync.schemas.activity import Activity
from teamsync.services.activity_service import ActivityFeed, time_label
from teamsync.services.entity_store import EntityStore

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _entry(time: str) -> Activity:
    return Activity(id="a", user="Alice", action="Document created", target="Plan", time=time)


class TestTimeLabel:
    def test_just_now(self):
        assert time_label(_entry((NOW - timedelta(seconds=30)).isoformat()), NOW) == "just now"

    def test_minutes(self):
        assert time_label(_entry((NOW - timedelta(minutes=1)).isoformat()), NOW) == "1 minute ago"
        assert time_label(_entry((NOW - timedelta(minutes=10)).isoformat()), NOW) == "10 minutes ago"

    def test_hours_and_days(self):
        assert time_label(_entry((NOW - timedelta(hours=3)).isoformat()), NOW) == "3 hours ago"
        assert time_label(_entry((NOW - timedelta(days=2)).isoformat()), NOW) == "2 days ago"

    def test_naive_timestamp_treated_as_utc(self):
        assert time_label(_entry("2024-05-01T11:00:00"), NOW) == "1 hour ago"

    def test_legacy_label_shown_verbatim(self):
        assert time_label(_entry("10 minutes ago"), NOW) == "10 minutes ago"


class TestRecord:
    @pytest.mark.asyncio
    async def test_stored_entry_is_prepended(self, sql_gateway):
        feed = ActivityFeed(EntityStore(sql_gateway))
        await feed.record("Alice", "Document created", "One")
        second = await feed.record("Alice", "Document created", "Two")

        assert feed.recent()[0] == second
        assert [a.target for a in await sql_gateway.activities.list()] == ["Two", "One"]

    @pytest.mark.asyncio
    async def test_storage_failure_returns_none(self, sql_gateway):
        async def broken(**kwargs):
            raise StorageError("down", "activities")

        sql_gateway.activities.append = broken
        feed = ActivityFeed(EntityStore(sql_gateway))

        assert await feed.record("Alice", "Task completed", "x") is None
        assert feed.recent() == []

    @pytest.mark.asyncio
    async def test_render_labels(self, sql_gateway):
        feed = ActivityFeed(EntityStore(sql_gateway))
        await feed.record("Alice", "Document created", "Plan")
        [view] = feed.render()
        assert view.time_label == "just now"
        assert view.target == "Plan"
