"""Shared schema plumbing: wire format, ids, timestamps, enums."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# 12 hex chars = 48 bits of randomness; ids are generated on the client side
# of the gateway so the UI can render before the write settles.
ENTITY_ID_LENGTH = 12


def new_id() -> str:
    return uuid.uuid4().hex[:ENTITY_ID_LENGTH]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(str, Enum):
    """Visibility partition for documents and folders."""
    PERSONAL = "Personal"
    TEAM = "Team"

    def toggled(self) -> "Category":
        return Category.TEAM if self is Category.PERSONAL else Category.PERSONAL


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Role(str, Enum):
    ADMIN = "Admin"
    MEMBER = "Member"


class WireModel(BaseModel):
    """Base for every stored entity.

    Fields are snake_case in Python and camelCase on the wire
    (``folder_id`` <-> ``folderId``). Either name is accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_record(self) -> Dict[str, Any]:
        """Serialize as a stored document body.

        ``None`` fields are dropped, so clearing an optional field removes the
        key from the stored document instead of writing ``null``.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_record(cls, body: Dict[str, Any]):
        return cls.model_validate(body)
