"""Activity feed schemas."""

from pydantic import BaseModel

from .common import WireModel


class Activity(WireModel):
    """Immutable feed entry. ``id`` and ``time`` are stamped by the gateway."""
    id: str
    user: str
    action: str
    target: str
    time: str  # ISO-8601 UTC timestamp


class ActivityView(BaseModel):
    """Activity as rendered in the feed, with a relative time label."""
    id: str
    user: str
    action: str
    target: str
    time: str
    time_label: str
