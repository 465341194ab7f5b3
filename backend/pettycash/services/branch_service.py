"""Branch management services."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pettycash.models.branch import Branch
from pettycash.schemas.branch import BranchCreate


async def list_branches(
    session: AsyncSession, *, organization_id: uuid.UUID
) -> list[Branch]:
    result = await session.execute(
        select(Branch)
        .where(Branch.organization_id == organization_id)
        .order_by(Branch.name.asc())
    )
    return list(result.scalars().all())


async def get_branch(
    session: AsyncSession, *, organization_id: uuid.UUID, branch_id: uuid.UUID
) -> Branch | None:
    branch = await session.get(Branch, branch_id)
    if branch is None or branch.organization_id != organization_id:
        return None
    return branch


async def create_branch(
    session: AsyncSession, *, organization_id: uuid.UUID, payload: BranchCreate
) -> Branch:
    """Create a branch; names are unique per organization."""
    branch = Branch(organization_id=organization_id, **payload.model_dump())
    session.add(branch)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ValueError("A branch with this name already exists") from exc
    await session.refresh(branch)
    return branch

