"""
Shared pytest fixtures for the RBAC core.

Provides:
- A fresh SQLite database per test (aiosqlite, schema via create_all)
- A session with the permission catalog & default roles seeded
- Factories for roles with a given permission set and for users
- An HTTP client bound to the FastAPI app (httpx over ASGI)
"""

import uuid
from collections.abc import Awaitable, Callable

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from admin_rbac.core.security import create_access_token
from admin_rbac.main import create_app
from admin_rbac.models import Base, Permission, Role, User, role_permissions
from admin_rbac.rbac.permission_seed import seed

RoleFactory = Callable[..., Awaitable[Role]]
UserFactory = Callable[..., Awaitable[User]]


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rbac.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    """Session over a database holding the seeded catalog and default roles."""
    async with session_factory() as session:
        await seed(session)
        yield session


@pytest_asyncio.fixture
async def permission_ids(db) -> dict[str, int]:
    """code → id for the whole catalog."""
    rows = (await db.execute(select(Permission.code, Permission.id))).all()
    return {code: pid for code, pid in rows}


# ============================================================================
# Test Data Factories
# ============================================================================

@pytest_asyncio.fixture
async def make_role(db, permission_ids) -> RoleFactory:
    async def _make_role(name: str, codes: list[str] | None = None) -> Role:
        role = Role(name=name, description=f"{name} role")
        db.add(role)
        await db.flush()
        if codes:
            await db.execute(
                insert(role_permissions),
                [{"role_id": role.id, "permission_id": permission_ids[code]} for code in codes],
            )
        await db.commit()
        return role

    return _make_role


@pytest_asyncio.fixture
async def make_user(db) -> UserFactory:
    async def _make_user(role: Role | None = None, email: str | None = None) -> User:
        user = User(
            id=uuid.uuid4(),
            email=email,
            role_id=role.id if role is not None else None,
        )
        db.add(user)
        await db.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def super_admin(db, make_user) -> User:
    role = (await db.execute(select(Role).where(Role.name == "super_admin"))).scalar_one()
    return await make_user(role, email="admin@example.com")


# ============================================================================
# API Client Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def client(session_factory, db):
    app = create_app(session_factory, seed_on_startup=False)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    def _auth_headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth_headers
