"""Service layer exports."""
from pettycash.services import (
    audit_service,
    auth_service,
    branch_service,
    petty_cash_ledger,
    petty_cash_service,
    receipt_service,
    user_service,
)

__all__ = [
    "audit_service",
    "auth_service",
    "branch_service",
    "petty_cash_ledger",
    "petty_cash_service",
    "receipt_service",
    "user_service",
]
