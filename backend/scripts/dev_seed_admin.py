"""Seed a development organization, branch and root user."""

from __future__ import annotations

import asyncio

from sqlalchemy import select

from pettycash.db.session import session_scope
from pettycash.models import Branch, Organization, UserRole
from pettycash.schemas.user import UserCreate
from pettycash.services import user_service

EMAIL = "admin@dealership.local"
PASSWORD = "admin1234"
ORG_SLUG = "dev-dealership"


async def main() -> None:
    async with session_scope() as session:
        if await user_service.get_user_by_email(session, EMAIL):
            print(f"User {EMAIL} already exists")
            return

        result = await session.execute(
            select(Organization).where(Organization.slug == ORG_SLUG)
        )
        organization = result.scalar_one_or_none()
        if organization is None:
            organization = Organization(name="Dev Dealership", slug=ORG_SLUG)
            organization.branches.append(Branch(name="Main"))
            session.add(organization)
            await session.commit()

        await user_service.create_user(
            session,
            organization_id=organization.id,
            payload=UserCreate(
                email=EMAIL,
                password=PASSWORD,
                first_name="Dev",
                last_name="Admin",
                role=UserRole.ROOT,
            ),
        )
        print(f"Created organization {ORG_SLUG} and root user {EMAIL} / {PASSWORD}")


if __name__ == "__main__":
    asyncio.run(main())
