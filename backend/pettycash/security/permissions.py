"""Role helpers for explicit authorization checks."""

from __future__ import annotations

from typing import Final

from fastapi import HTTPException, status

from pettycash.models.user import User, UserRole

CASH_MANAGERS: Final = frozenset({UserRole.ROOT, UserRole.ADMIN, UserRole.CASH_MANAGER})
USER_ADMINS: Final = frozenset({UserRole.ROOT, UserRole.ADMIN})


def require_roles(user: User, allowed: frozenset[UserRole] | set[UserRole]) -> None:
    """Raise HTTP 403 unless the user holds one of the allowed roles."""

    if user.role not in allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )


def require_recipient_or_manager(user: User, recipient_id: object) -> None:
    """Allow the withdrawal's recipient or any cash-managing role."""

    if user.id == recipient_id or user.role in CASH_MANAGERS:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Only the withdrawal recipient or a cash manager may do this",
    )


__all__ = [
    "CASH_MANAGERS",
    "USER_ADMINS",
    "require_recipient_or_manager",
    "require_roles",
]
