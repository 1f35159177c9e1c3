"""Schedule event schemas."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .common import WireModel, new_id

_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ScheduleType(str, Enum):
    MEETING = "Meeting"
    BUSINESS_TRIP = "Business trip"
    VACATION = "Vacation"
    REMOTE = "Remote work"
    PERSONAL = "Personal"


class ScheduleEvent(WireModel):
    """Calendar entry covering ``[start_date, end_date]``, both days inclusive."""
    id: str = Field(default_factory=new_id)
    user_id: str
    user_name: str
    title: str
    type: ScheduleType = ScheduleType.MEETING
    start_date: date
    end_date: date
    start_time: Optional[str] = Field(default=None, pattern=_TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=_TIME_PATTERN)
    description: str = ""

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


class ScheduleCreate(BaseModel):
    """Request body for a new schedule entry; owner comes from the session."""
    title: str
    type: ScheduleType = ScheduleType.MEETING
    start_date: date
    end_date: date
    start_time: Optional[str] = Field(default=None, pattern=_TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=_TIME_PATTERN)
    description: str = ""

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Schedule title cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_range(self) -> "ScheduleCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self
