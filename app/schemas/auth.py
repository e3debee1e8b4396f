"""Pydantic schemas for signup/login payloads and the public user projection."""
from datetime import datetime, timezone

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; its CURRENT_TIMESTAMP is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SignupSchema(BaseModel):
    # Presence is checked in the route so a missing field is a 400, not a 422
    email: str | None = None
    password: str | None = None
    name: str | None = None


class LoginSchema(BaseModel):
    email: str | None = None
    password: str | None = None


class UserOutSchema(BaseModel):
    """What callers may see of a user; never the password hash."""

    id: int
    email: str
    name: str = ""
    created_at: datetime | None = None

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class AuthUserSchema(BaseModel):
    """Identity attached to a request by the auth dependencies."""

    id: int
    email: str
    name: str = ""

    class Config:
        from_attributes = True


class UserSummarySchema(UserOutSchema):
    sessions_count: int = 0
