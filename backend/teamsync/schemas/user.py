"""User and session schemas."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .common import Role, WireModel


class User(WireModel):
    """A team member. ``password_hash`` never leaves the service layer."""
    id: str
    name: str
    role: Role = Role.MEMBER
    password_hash: Optional[str] = None

    def public(self) -> "UserPublic":
        return UserPublic(id=self.id, name=self.name, role=self.role)


class UserPublic(BaseModel):
    id: str
    name: str
    role: Role


def _strip_required(value: str, label: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{label} cannot be empty")
    return value


class RegisterRequest(BaseModel):
    id: str
    name: str
    password: str = Field(..., min_length=6)
    role: Role = Role.MEMBER

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _strip_required(v, "User id")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_required(v, "Name")


class LoginRequest(BaseModel):
    id: str
    password: str


class ProfileUpdate(BaseModel):
    """Partial profile change. A new ``id`` migrates ownership of every record."""
    id: Optional[str] = None
    name: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=6)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserPublic
