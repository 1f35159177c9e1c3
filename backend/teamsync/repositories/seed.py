"""Sample data for a freshly created local store.

Dates are computed at seeding time so the dashboard has something to show
for "today".
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List


def _iso(dt: datetime) -> str:
    return dt.isoformat()


def _schedules(today: date) -> List[Dict[str, Any]]:
    return [
        {
            "id": "s1",
            "userId": "u1",
            "userName": "Chulsoo Kim",
            "title": "Q4 marketing strategy meeting",
            "type": "Meeting",
            "startDate": today.isoformat(),
            "endDate": today.isoformat(),
            "startTime": "10:00",
            "endTime": "11:30",
            "description": "Meeting room A",
        },
        {
            "id": "s2",
            "userId": "u2",
            "userName": "Younghee Lee",
            "title": "Client visit in Busan",
            "type": "Business trip",
            "startDate": (today + timedelta(days=3)).isoformat(),
            "endDate": (today + timedelta(days=4)).isoformat(),
            "description": "On-site visit and contract review",
        },
        {
            "id": "s3",
            "userId": "u3",
            "userName": "Minsoo Park",
            "title": "Summer vacation",
            "type": "Vacation",
            "startDate": (today + timedelta(days=10)).isoformat(),
            "endDate": (today + timedelta(days=13)).isoformat(),
            "description": "Jeju island",
        },
    ]


def _activities(now: datetime) -> List[Dict[str, Any]]:
    # Stored oldest first; the gateway lists newest first.
    return [
        {"id": "a3", "user": "Chulsoo Kim", "action": "File uploaded", "target": "design_draft_v2.pdf",
         "time": _iso(now - timedelta(hours=3))},
        {"id": "a2", "user": "Minsoo Park", "action": "Comment added", "target": "Q4 results report",
         "time": _iso(now - timedelta(hours=1))},
        {"id": "a1", "user": "Younghee Lee", "action": "Document created", "target": "2024 marketing plan",
         "time": _iso(now - timedelta(minutes=10))},
    ]


def _docs(now: datetime) -> List[Dict[str, Any]]:
    return [
        {
            "id": "d1",
            "title": "Business plan",
            "content": "# Business goals\n\n1. Grow revenue\n2. Hire five engineers\n3. Expand abroad\n",
            "authorId": "admin",
            "authorName": "Administrator",
            "createdAt": "2023-10-01T10:00:00+00:00",
            "updatedAt": _iso(now),
            "emoji": "🚀",
            "category": "Team",
        },
        {
            "id": "d2",
            "title": "Personal notes",
            "content": "- [ ] Weekly report\n- [ ] Prepare design review\n- [ ] Submit card receipts",
            "authorId": "u1",
            "authorName": "Chulsoo Kim",
            "createdAt": "2023-11-01T09:00:00+00:00",
            "updatedAt": "2023-11-01T09:05:00+00:00",
            "emoji": "📒",
            "category": "Personal",
        },
    ]


def _tasks() -> List[Dict[str, Any]]:
    return [
        {"id": "t1", "userId": "u1", "title": "Write weekly report", "dueDate": "Today",
         "completed": False, "priority": "High"},
        {"id": "t2", "userId": "u1", "title": "Prepare client meeting material", "dueDate": "Tomorrow",
         "completed": False, "priority": "Medium"},
        {"id": "t3", "userId": "u1", "title": "Submit card receipts", "dueDate": "Friday",
         "completed": True, "priority": "Low", "hasLoggedCompletion": True},
    ]


def seed_records(collection: str) -> List[Dict[str, Any]]:
    """Sample bodies for ``collection`` (empty for collections without samples)."""
    now = datetime.now(timezone.utc)
    if collection == "schedules":
        return _schedules(now.date())
    if collection == "activities":
        return _activities(now)
    if collection == "docs":
        return _docs(now)
    if collection == "tasks":
        return _tasks()
    return []
