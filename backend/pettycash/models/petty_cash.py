"""Petty cash ledger models: deposits, withdrawals and spends."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pettycash.db.base import Base
from pettycash.models.mixins import TimestampMixin, enum_values, utcnow

if TYPE_CHECKING:  # pragma: no cover - typing only
    from pettycash.models import Branch, Organization, User


class PettyCashDepositStatus(str, enum.Enum):
    """Reconciliation state of a cash float."""

    OPEN = "open"
    CLOSED = "closed"
    PENDING_FUNDING = "pending_funding"


class PettyCashWithdrawalStatus(str, enum.Enum):
    """Justification state of cash handed to an employee."""

    PENDING = "pending"
    PARTIALLY_JUSTIFIED = "partially_justified"
    JUSTIFIED = "justified"
    NOT_CLOSED = "not_closed"


class PettyCashDeposit(TimestampMixin, Base):
    """Cash float allocated to an organization or one of its branches."""

    __tablename__ = "petty_cash_deposits"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="deposit_amount_non_negative"),
        CheckConstraint(
            "remaining_amount >= 0 AND remaining_amount <= amount",
            name="deposit_remaining_in_range",
        ),
        Index("ix_petty_cash_deposits_org_branch", "organization_id", "branch_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    # null branch means the organization's general account
    branch_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("branches.id", ondelete="SET NULL"), nullable=True
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    reference: Mapped[str | None] = mapped_column(String(120))
    deposit_date: Mapped[date | None] = mapped_column(Date)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    remaining_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[PettyCashDepositStatus] = mapped_column(
        Enum(
            PettyCashDepositStatus,
            name="petty_cash_deposit_status",
            values_callable=enum_values,
        ),
        nullable=False,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    organization: Mapped["Organization"] = relationship(
        "Organization", back_populates="petty_cash_deposits"
    )
    branch: Mapped["Branch | None"] = relationship("Branch")
    withdrawals: Mapped[list["PettyCashWithdrawal"]] = relationship(
        "PettyCashWithdrawal",
        back_populates="deposit",
        cascade="all, delete-orphan",
        order_by="PettyCashWithdrawal.created_at",
    )


class PettyCashWithdrawal(Base):
    """Funds given to a user, pending justification through spends."""

    __tablename__ = "petty_cash_withdrawals"
    __table_args__ = (
        CheckConstraint("amount_given > 0", name="withdrawal_amount_positive"),
        CheckConstraint(
            "amount_justified >= 0 AND amount_justified <= amount_given",
            name="withdrawal_justified_in_range",
        ),
        Index("ix_petty_cash_withdrawals_status_created", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    deposit_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("petty_cash_deposits.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255))
    withdrawal_date: Mapped[date | None] = mapped_column(Date)
    amount_given: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    amount_justified: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    status: Mapped[PettyCashWithdrawalStatus] = mapped_column(
        Enum(
            PettyCashWithdrawalStatus,
            name="petty_cash_withdrawal_status",
            values_callable=enum_values,
        ),
        nullable=False,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    __mapper_args__ = {"version_id_col": version}

    deposit: Mapped[PettyCashDeposit] = relationship(
        "PettyCashDeposit", back_populates="withdrawals"
    )
    user: Mapped["User"] = relationship("User")
    spends: Mapped[list["PettyCashSpend"]] = relationship(
        "PettyCashSpend",
        back_populates="withdrawal",
        cascade="all, delete-orphan",
        order_by="PettyCashSpend.created_at",
    )


class PettyCashSpend(Base):
    """Itemized expense justifying part of a withdrawal."""

    __tablename__ = "petty_cash_spends"
    __table_args__ = (
        CheckConstraint("amount > 0", name="spend_amount_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    withdrawal_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("petty_cash_withdrawals.id", ondelete="CASCADE"), nullable=False
    )
    motive: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    ticket_url: Mapped[str | None] = mapped_column(String(1024))
    spend_date: Mapped[date | None] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    withdrawal: Mapped[PettyCashWithdrawal] = relationship(
        "PettyCashWithdrawal", back_populates="spends"
    )
