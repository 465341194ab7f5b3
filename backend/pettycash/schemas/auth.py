"""Authentication schemas."""
from __future__ import annotations

from pydantic import BaseModel


class Token(BaseModel):
    """Response body for access tokens."""

    access_token: str
    token_type: str = "bearer"

