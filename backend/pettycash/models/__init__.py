"""ORM models package export."""

from pettycash.models.audit_event import AuditEvent
from pettycash.models.branch import Branch
from pettycash.models.organization import Organization
from pettycash.models.petty_cash import (
    PettyCashDeposit,
    PettyCashDepositStatus,
    PettyCashSpend,
    PettyCashWithdrawal,
    PettyCashWithdrawalStatus,
)
from pettycash.models.user import User, UserRole, UserStatus

__all__ = [
    "AuditEvent",
    "Branch",
    "Organization",
    "PettyCashDeposit",
    "PettyCashDepositStatus",
    "PettyCashSpend",
    "PettyCashWithdrawal",
    "PettyCashWithdrawalStatus",
    "User",
    "UserRole",
    "UserStatus",
]
