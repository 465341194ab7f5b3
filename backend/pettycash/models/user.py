"""User model for dealership staff identities."""
from __future__ import annotations

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pettycash.db.base import Base
from pettycash.models.mixins import TimestampMixin, enum_values

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from pettycash.models.branch import Branch
    from pettycash.models.organization import Organization


class UserRole(str, enum.Enum):
    """Role enumeration for platform permissions."""

    ROOT = "root"
    ADMIN = "admin"
    CASH_MANAGER = "cash_manager"
    SELLER = "seller"


class UserStatus(str, enum.Enum):
    """Enumerates user activation states."""

    ACTIVE = "active"
    SUSPENDED = "suspended"


class User(TimestampMixin, Base):
    """User entity for authentication and authorization."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    branch_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("branches.id", ondelete="SET NULL"), nullable=True
    )
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(32))
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=enum_values), nullable=False
    )
    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus, name="user_status", values_callable=enum_values),
        default=UserStatus.ACTIVE,
        nullable=False,
    )

    organization: Mapped["Organization"] = relationship(
        "Organization", back_populates="users"
    )
    branch: Mapped["Branch | None"] = relationship("Branch")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
