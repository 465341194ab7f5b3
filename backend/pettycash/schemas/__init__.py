"""Pydantic schemas package."""

from pettycash.schemas.auth import Token
from pettycash.schemas.branch import BranchCreate, BranchRead
from pettycash.schemas.petty_cash import (
    ActivityReportRead,
    DepositCreate,
    DepositRead,
    MovementRead,
    ReconcileRequest,
    ReconcileResult,
    SpendCreate,
    SpendRead,
    TicketUploadResult,
    WithdrawalCreate,
    WithdrawalRead,
)
from pettycash.schemas.user import UserCreate, UserRead

__all__ = [
    "ActivityReportRead",
    "BranchCreate",
    "BranchRead",
    "DepositCreate",
    "DepositRead",
    "MovementRead",
    "ReconcileRequest",
    "ReconcileResult",
    "SpendCreate",
    "SpendRead",
    "TicketUploadResult",
    "Token",
    "UserCreate",
    "UserRead",
    "WithdrawalCreate",
    "WithdrawalRead",
]
