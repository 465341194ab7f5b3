"""Branch endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pettycash.api import deps
from pettycash.models.user import User
from pettycash.schemas.branch import BranchCreate, BranchRead
from pettycash.security.permissions import USER_ADMINS, require_roles
from pettycash.services import branch_service

router = APIRouter()


@router.get("", response_model=list[BranchRead], summary="List branches")
async def list_branches(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> list[BranchRead]:
    branches = await branch_service.list_branches(
        session, organization_id=current_user.organization_id
    )
    return [BranchRead.model_validate(branch) for branch in branches]


@router.post(
    "",
    response_model=BranchRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create branch",
)
async def create_branch(
    payload: BranchCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_active_user)],
) -> BranchRead:
    require_roles(current_user, USER_ADMINS)
    try:
        branch = await branch_service.create_branch(
            session, organization_id=current_user.organization_id, payload=payload
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return BranchRead.model_validate(branch)
