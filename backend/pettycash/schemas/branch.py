"""Branch schemas."""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BranchCreate(BaseModel):
    """Payload for creating a branch in the caller's organization."""

    name: str = Field(min_length=1, max_length=255)
    address: str | None = Field(default=None, max_length=255)
    phone_number: str | None = Field(default=None, max_length=32)


class BranchRead(BaseModel):
    """Serialized branch."""

    id: uuid.UUID
    organization_id: uuid.UUID
    name: str
    address: str | None = None
    phone_number: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
