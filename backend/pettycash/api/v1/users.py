"""User management endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pettycash.api import deps
from pettycash.models.user import User, UserRole
from pettycash.schemas.user import UserCreate, UserRead
from pettycash.security.permissions import USER_ADMINS, require_roles
from pettycash.services import branch_service, user_service

router = APIRouter()


@router.get("/me", response_model=UserRead, summary="Current user profile")
async def read_current_user(
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> UserRead:
    return UserRead.model_validate(current_user)


@router.get("", response_model=list[UserRead], summary="List users")
async def list_users(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
    skip: int = 0,
    limit: int = 50,
) -> list[UserRead]:
    """Return users of the caller's organization."""
    require_roles(current_user, USER_ADMINS)
    users = await user_service.list_users(
        session, organization_id=current_user.organization_id, skip=skip, limit=limit
    )
    return [UserRead.model_validate(obj) for obj in users]


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
async def create_user(
    payload: UserCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> UserRead:
    """Create a user within the caller's organization."""
    require_roles(current_user, USER_ADMINS)
    if payload.role == UserRole.ROOT and current_user.role != UserRole.ROOT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Cannot assign higher role"
        )
    if payload.branch_id is not None:
        branch = await branch_service.get_branch(
            session,
            organization_id=current_user.organization_id,
            branch_id=payload.branch_id,
        )
        if branch is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Branch not found"
            )
    try:
        user = await user_service.create_user(
            session, organization_id=current_user.organization_id, payload=payload
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return UserRead.model_validate(user)
