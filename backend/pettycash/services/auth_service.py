"""Authentication service helpers."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from pettycash.core.security import create_access_token, verify_password
from pettycash.models.user import User, UserStatus
from pettycash.services import user_service

logger = logging.getLogger(__name__)


async def authenticate_user(
    session: AsyncSession, email: str, password: str
) -> User | None:
    """Validate credentials and return the active user, if any."""
    user = await user_service.get_user_by_email(session, email=email)
    if user is None or user.status != UserStatus.ACTIVE:
        return None
    if not verify_password(password, user.hashed_password):
        logger.warning("Failed login for user %s", user.id)
        return None
    return user


def create_access_token_for_user(user: User) -> str:
    return create_access_token(
        str(user.id), role=user.role.value, org=str(user.organization_id)
    )
