"""
Catalog and default-role seeding.

Populates the permission catalog and the default roles.  It is
IDEMPOTENT — safe to re-run: existing permissions are left untouched
(codes are immutable) and existing roles keep whatever permission set
an administrator has given them since.

Usage:
    python -m admin_rbac.rbac.permission_seed
"""

import asyncio
import logging

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from admin_rbac.core.config import settings
from admin_rbac.core.database import build_engine, build_session_factory
from admin_rbac.models.base import Base
from admin_rbac.models.permission import Permission, PermissionCategory
from admin_rbac.models.role import Role, role_permissions
from admin_rbac.rbac.catalog import PERMISSIONS, ROLE_DESCRIPTIONS, ROLE_PERMISSIONS

logger = logging.getLogger(__name__)


async def seed(session: AsyncSession) -> None:
    """Add missing catalog codes, then create any missing default role."""
    # catalog codes are immutable; only missing ones are added
    known = (await session.execute(select(Permission))).scalars().all()
    by_code: dict[str, Permission] = {p.code: p for p in known}

    created = 0
    for entry in PERMISSIONS:
        if entry["code"] in by_code:
            continue
        perm = Permission(
            code=entry["code"],
            name=entry["name"],
            description=entry["description"],
            category=PermissionCategory(entry["category"]),
        )
        session.add(perm)
        by_code[entry["code"]] = perm
        created += 1

    await session.flush()

    # a default role is created once; after that administrators own its set
    present = set((await session.execute(select(Role.name))).scalars().all())
    for role_name, perm_codes in ROLE_PERMISSIONS.items():
        if role_name in present:
            continue
        role = Role(name=role_name, description=ROLE_DESCRIPTIONS.get(role_name))
        session.add(role)
        await session.flush()

        rows = [
            {"role_id": role.id, "permission_id": by_code[code].id}
            for code in perm_codes
            if code in by_code
        ]
        if rows:
            await session.execute(insert(role_permissions), rows)
        logger.info("Seeded role %s with %d permissions", role_name, len(rows))

    await session.commit()
    logger.info("Permission catalog seeded (%d new permissions).", created)


async def main() -> None:
    """Create tables if missing, then seed.  Handy for local databases without Alembic."""
    engine = build_engine(settings.DATABASE_URL)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with build_session_factory(engine)() as session:
            await seed(session)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
