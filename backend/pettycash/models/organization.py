"""Organization model representing a dealership tenant."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pettycash.db.base import Base
from pettycash.models.mixins import TimestampMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from pettycash.models.branch import Branch
    from pettycash.models.petty_cash import PettyCashDeposit
    from pettycash.models.user import User


class Organization(TimestampMixin, Base):
    """A dealership tenant that owns branches, users and petty cash."""

    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    branches: Mapped[list["Branch"]] = relationship(
        "Branch", back_populates="organization", cascade="all, delete-orphan"
    )
    users: Mapped[list["User"]] = relationship(
        "User", back_populates="organization", cascade="all, delete-orphan"
    )
    petty_cash_deposits: Mapped[list["PettyCashDeposit"]] = relationship(
        "PettyCashDeposit", back_populates="organization", cascade="all, delete-orphan"
    )
