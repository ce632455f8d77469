"""
Role administration — CRUD plus the usage-checked delete.

`delete_role` locks the role row before checking usage so a concurrent
`assign_role` cannot slip a user onto the role between the check and
the delete.  Its permission rows are removed in the same transaction.
"""

import logging

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from admin_rbac.models.role import Role, role_permissions
from admin_rbac.models.user import User
from admin_rbac.rbac.errors import DuplicateRole, NotFound, RoleInUse

logger = logging.getLogger(__name__)


async def list_roles(db: AsyncSession) -> list[Role]:
    result = await db.execute(select(Role).order_by(Role.name))
    return list(result.scalars().all())


async def get_role(role_id: int, db: AsyncSession, *, for_update: bool = False) -> Role:
    stmt = select(Role).where(Role.id == role_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    role = (await db.execute(stmt)).scalar_one_or_none()
    if role is None:
        raise NotFound("Role", role_id)
    return role


async def _ensure_name_free(name: str, db: AsyncSession, *, exclude_id: int | None = None) -> None:
    stmt = select(Role.id).where(Role.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Role.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise DuplicateRole(name)


async def create_role(name: str, description: str | None, db: AsyncSession) -> Role:
    await _ensure_name_free(name, db)
    role = Role(name=name, description=description)
    db.add(role)
    try:
        await db.flush()
    except IntegrityError as exc:
        # lost a race with another create of the same name
        raise DuplicateRole(name) from exc
    logger.info("Role %s created (id=%s)", name, role.id)
    return role


async def update_role(
    role_id: int,
    db: AsyncSession,
    *,
    name: str | None = None,
    description: str | None = None,
) -> Role:
    role = await get_role(role_id, db)
    if name is not None and name != role.name:
        await _ensure_name_free(name, db, exclude_id=role_id)
        role.name = name
    if description is not None:
        role.description = description
    try:
        await db.flush()
    except IntegrityError as exc:
        # lost a race with a concurrent rename or create
        raise DuplicateRole(role.name) from exc
    return role


async def is_role_in_use(role_id: int, db: AsyncSession) -> bool:
    """True if any user currently has `role_id`."""
    stmt = select(exists().where(User.role_id == role_id))
    return bool((await db.execute(stmt)).scalar())


async def delete_role(role_id: int, db: AsyncSession) -> None:
    """Delete a role nobody uses.  Raises RoleInUse (and deletes nothing) otherwise."""
    role = await get_role(role_id, db, for_update=True)

    if await is_role_in_use(role_id, db):
        logger.warning("Refusing to delete role %s — still assigned to users", role.name)
        raise RoleInUse(role_id)

    await db.execute(delete(role_permissions).where(role_permissions.c.role_id == role_id))
    await db.delete(role)
    await db.flush()
    logger.info("Role %s deleted (id=%s)", role.name, role_id)
