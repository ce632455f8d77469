"""
User service — principal profile lookups and role assignment.

Identity itself is owned by the external provider; this service only
manages which role (if any) a principal carries.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from admin_rbac.models.user import User
from admin_rbac.rbac.errors import NotFound
from admin_rbac.services import role_service


async def get_user_by_id(user_id: uuid.UUID, db: AsyncSession) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User", user_id)
    return user


async def assign_role(user_id: uuid.UUID, role_id: int | None, db: AsyncSession) -> User:
    """Give the user `role_id`, or no role at all when None."""
    user = await get_user_by_id(user_id, db)
    if role_id is not None:
        await role_service.get_role(role_id, db, for_update=True)
    user.role_id = role_id
    await db.flush()
    return user
