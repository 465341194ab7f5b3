"""User-related schemas."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, field_validator

from pettycash.models.user import UserRole, UserStatus

_EMAIL_ADAPTER = TypeAdapter(EmailStr)


def _validate_relaxed_email(value: str) -> str:
    """Accept ``*.local`` addresses used by dev seeds; validate the rest."""

    email = value.strip()
    local_part, _, domain = email.partition("@")
    if local_part and domain.endswith(".local"):
        return email
    return _EMAIL_ADAPTER.validate_python(email)


class UserBase(BaseModel):
    """Shared user fields."""

    email: str
    first_name: str
    last_name: str
    phone_number: str | None = None
    role: UserRole = Field(default=UserRole.SELLER)
    branch_id: uuid.UUID | None = None

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _validate_relaxed_email(value)


class UserCreate(UserBase):
    """Payload for creating a user."""

    password: str = Field(min_length=8)
    status: UserStatus = UserStatus.ACTIVE


class UserRead(UserBase):
    """Serialized user response."""

    id: uuid.UUID
    organization_id: uuid.UUID
    status: UserStatus

    model_config = ConfigDict(from_attributes=True)

