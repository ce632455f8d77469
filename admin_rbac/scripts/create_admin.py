"""
One-time bootstrap script — gives the first principal the super_admin role.

Usage:
    uv run python -m admin_rbac.scripts.create_admin

The principal id is the subject the identity provider issues for that
person.  After the first super admin exists, every other role change
goes through `PUT /api/users/{id}/role`.
"""

import asyncio
import uuid

from sqlalchemy import select

from admin_rbac.core.config import settings
from admin_rbac.core.database import build_engine, build_session_factory
from admin_rbac.core.security import create_access_token
from admin_rbac.models.role import Role
from admin_rbac.models.user import User


async def create_admin() -> None:
    engine = build_engine(settings.DATABASE_URL)
    session_factory = build_session_factory(engine)

    async with session_factory() as session:
        # ── Collect input ────────────────────────────────────────────
        print("\n🔧  Admin RBAC — First Super Admin Setup\n")
        raw_id = input("  Principal id (UUID from the identity provider): ").strip()
        email = input("  Email:     ").strip()
        full_name = input("  Full name: ").strip()

        try:
            principal_id = uuid.UUID(raw_id)
        except ValueError:
            print(f"\n❌  '{raw_id}' is not a valid UUID.")
            await engine.dispose()
            return

        # ── Find super_admin role (must be seeded first) ─────────────
        admin_role = (
            await session.execute(select(Role).where(Role.name == "super_admin"))
        ).scalar_one_or_none()

        if admin_role is None:
            print("\n❌  super_admin role not found. Start the app once first so")
            print("   permissions & roles get seeded, then re-run this script.")
            await engine.dispose()
            return

        # ── Create or promote the profile ────────────────────────────
        user = await session.get(User, principal_id)
        if user is None:
            user = User(id=principal_id, email=email or None, full_name=full_name or None)
            session.add(user)
        user.role_id = admin_role.id
        await session.commit()

        print("\n✅  Super admin ready!")
        print(f"    ID:    {user.id}")
        print(f"    Email: {user.email}")
        print("    Role:  super_admin")
        print(f"\n   Development token:\n   {create_access_token(user.id)}\n")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(create_admin())
