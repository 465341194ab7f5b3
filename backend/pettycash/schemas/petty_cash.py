"""Petty cash ledger schemas."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from pettycash.models.petty_cash import (
    PettyCashDepositStatus,
    PettyCashWithdrawalStatus,
)


class DepositCreate(BaseModel):
    """Payload for opening a deposit.

    Amounts are validated by the ledger so non-positive values surface as
    ``InvalidAmount`` (HTTP 400) rather than a schema error.
    """

    amount: Decimal
    description: str = Field(min_length=1, max_length=255)
    branch_id: uuid.UUID | None = None
    reference: str | None = Field(default=None, max_length=120)
    deposit_date: date | None = None


class WithdrawalCreate(BaseModel):
    """Payload for drawing funds; ``deposit_id`` defaults to the latest open deposit."""

    user_id: uuid.UUID
    amount_given: Decimal
    deposit_id: uuid.UUID | None = None
    branch_id: uuid.UUID | None = None
    user_name: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=255)
    withdrawal_date: date | None = None


class SpendCreate(BaseModel):
    amount: Decimal
    description: str | None = Field(default=None, max_length=255)
    motive: str | None = Field(default=None, max_length=64)
    ticket_url: str | None = Field(default=None, max_length=1024)
    spend_date: date | None = None


class SpendRead(BaseModel):
    id: uuid.UUID
    withdrawal_id: uuid.UUID
    motive: str
    description: str
    amount: Decimal
    ticket_url: str | None = None
    spend_date: date | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WithdrawalRead(BaseModel):
    """Serialized withdrawal with its spends."""

    id: uuid.UUID
    deposit_id: uuid.UUID
    user_id: uuid.UUID
    user_name: str
    description: str | None = None
    withdrawal_date: date | None = None
    amount_given: Decimal
    amount_justified: Decimal
    status: PettyCashWithdrawalStatus
    created_at: datetime
    spends: list[SpendRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class DepositRead(BaseModel):
    """Serialized deposit aggregate."""

    id: uuid.UUID
    organization_id: uuid.UUID
    branch_id: uuid.UUID | None = None
    description: str
    reference: str | None = None
    deposit_date: date | None = None
    amount: Decimal
    remaining_amount: Decimal
    status: PettyCashDepositStatus
    version: int
    created_at: datetime
    updated_at: datetime
    withdrawals: list[WithdrawalRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ReconcileRequest(BaseModel):
    """Optional overrides for the overdue sweep."""

    as_of: datetime | None = None
    policy_window_days: int | None = Field(default=None, ge=1)


class ReconcileResult(BaseModel):
    as_of: datetime
    policy_window_days: int
    transitioned: int
    withdrawal_ids: list[uuid.UUID]


class TicketUploadResult(BaseModel):
    """Location of an uploaded receipt, ready to pass as ``ticket_url``."""

    key: str
    url: str
    content_type: str
    size: int


class MovementRead(BaseModel):
    id: uuid.UUID
    kind: str
    amount: Decimal
    description: str | None = None
    reference: str | None = None
    receipt_url: str | None = None
    user_id: uuid.UUID | None = None
    user_name: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActivityTotalsRead(BaseModel):
    deposits: Decimal
    withdrawals: Decimal
    spends: Decimal
    balance: Decimal

    model_config = ConfigDict(from_attributes=True)


class ActivityReportRead(BaseModel):
    """Deposits opened in a date range and their totals."""

    date_from: date
    date_to: date
    deposits: list[DepositRead]
    totals: ActivityTotalsRead

    model_config = ConfigDict(from_attributes=True)
