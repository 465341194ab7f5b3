"""Bootstrap the first organization and root user from settings."""

from __future__ import annotations

import logging
import re

from sqlalchemy import select

from pettycash.core.config import get_settings
from pettycash.db.session import get_sessionmaker
from pettycash.models import Organization, UserRole, UserStatus
from pettycash.schemas.user import UserCreate
from pettycash.services import user_service

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "organization"


async def ensure_default_admin() -> None:
    """Create the bootstrap root user when credentials are configured."""

    settings = get_settings()
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        return

    sessionmaker = get_sessionmaker(settings.database_url)
    async with sessionmaker() as session:
        if await user_service.get_user_by_email(session, settings.bootstrap_admin_email):
            return

        result = await session.execute(
            select(Organization).order_by(Organization.created_at.asc()).limit(1)
        )
        organization = result.scalar_one_or_none()
        if organization is None:
            organization = Organization(
                name=settings.bootstrap_organization_name,
                slug=slugify(settings.bootstrap_organization_name),
            )
            session.add(organization)
            await session.commit()
            await session.refresh(organization)

        payload = UserCreate(
            email=settings.bootstrap_admin_email,
            password=settings.bootstrap_admin_password,
            first_name="Root",
            last_name="Admin",
            role=UserRole.ROOT,
            status=UserStatus.ACTIVE,
        )
        await user_service.create_user(
            session, organization_id=organization.id, payload=payload
        )
        logger.info("Bootstrapped root user for organization %s", organization.slug)
