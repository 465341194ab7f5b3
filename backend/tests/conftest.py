"""Test fixtures for the petty cash backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from pettycash.core.config import get_settings
from pettycash.core.security import get_password_hash
from pettycash.db.base import Base
from pettycash.db.session import dispose_engine, get_sessionmaker
from pettycash.main import app
from pettycash.models import Branch, Organization, User, UserRole, UserStatus

PASSWORD = "Passw0rd!"


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest.fixture(scope="session")
def storage_root(tmp_path_factory: pytest.TempPathFactory) -> str:
    return str(tmp_path_factory.mktemp("storage"))


@pytest_asyncio.fixture()
async def reset_database(db_url: str, storage_root: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    os.environ["S3_BUCKET"] = "petty-cash-test"
    os.environ["S3_ROOT"] = storage_root
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


def _user(organization: Organization, email: str, first: str, role: UserRole, **extra) -> User:
    return User(
        organization_id=organization.id,
        email=email,
        hashed_password=get_password_hash(PASSWORD),
        first_name=first,
        last_name="Tester",
        role=role,
        status=UserStatus.ACTIVE,
        **extra,
    )


@pytest_asyncio.fixture()
async def seeded(reset_database: None, db_url: str) -> dict[str, object]:
    """Seed one organization with a branch and one user per role."""
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        organization = Organization(name="Moto Centro", slug="moto-centro")
        session.add(organization)
        await session.flush()

        branch = Branch(organization_id=organization.id, name="Downtown")
        session.add(branch)
        await session.flush()

        root = _user(organization, "root@example.com", "Rita", UserRole.ROOT)
        manager = _user(organization, "cash@example.com", "Carlos", UserRole.CASH_MANAGER)
        seller_a = _user(
            organization, "seller.a@example.com", "Ana", UserRole.SELLER, branch_id=branch.id
        )
        seller_b = _user(
            organization, "seller.b@example.com", "Beto", UserRole.SELLER, branch_id=branch.id
        )
        session.add_all([root, manager, seller_a, seller_b])
        await session.commit()

        return {
            "organization_id": organization.id,
            "branch_id": branch.id,
            "root_id": root.id,
            "root_email": root.email,
            "manager_id": manager.id,
            "manager_email": manager.email,
            "seller_a_id": seller_a.id,
            "seller_a_email": seller_a.email,
            "seller_b_id": seller_b.id,
            "seller_b_email": seller_b.email,
            "password": PASSWORD,
        }


@pytest_asyncio.fixture()
async def app_context(seeded: dict[str, object]) -> AsyncIterator[dict[str, object]]:
    """Yield an async client alongside the seeded identifiers."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context = dict(seeded)
        context["client"] = client
        yield context
