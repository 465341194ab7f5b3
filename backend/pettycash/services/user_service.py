"""User data access helpers."""
from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pettycash.core.security import get_password_hash
from pettycash.models.user import User
from pettycash.schemas.user import UserCreate


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def list_users(
    session: AsyncSession,
    *,
    organization_id: uuid.UUID,
    skip: int = 0,
    limit: int = 50,
) -> list[User]:
    result = await session.execute(
        select(User)
        .where(User.organization_id == organization_id)
        .order_by(User.last_name.asc(), User.first_name.asc())
        .offset(skip)
        .limit(min(limit, 100))
    )
    return list(result.scalars().all())


async def create_user(
    session: AsyncSession, *, organization_id: uuid.UUID, payload: UserCreate
) -> User:
    """Persist a new user with a hashed password.

    Raises ``ValueError`` when the email is already taken.
    """
    user = User(
        organization_id=organization_id,
        branch_id=payload.branch_id,
        email=payload.email.lower(),
        hashed_password=get_password_hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone_number=payload.phone_number,
        role=payload.role,
        status=payload.status,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ValueError("A user with this email already exists") from exc
    await session.refresh(user)
    return user

