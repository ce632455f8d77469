"""
Permission store — catalog reads and whole-set role assignment.

`replace_role_permissions` is the only write.  Its delete-then-insert
runs inside the caller's transaction (the request session), after the
role row has been locked with SELECT … FOR UPDATE, so:

- a crash between delete and insert rolls back to the previous set;
- two concurrent updates of the same role are serialised;
- every successful rewrite bumps `Role.permissions_version`, which a
  caller may pass back as `expected_version` for compare-and-swap.
"""

import logging
from collections.abc import Iterable

from sqlalchemy import case, delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from admin_rbac.core.config import settings
from admin_rbac.models.permission import Permission, PermissionCategory
from admin_rbac.models.role import Role, role_permissions
from admin_rbac.rbac.catalog import missing_menu_codes
from admin_rbac.rbac.errors import InvalidPermissionSet, VersionConflict
from admin_rbac.services import role_service

logger = logging.getLogger(__name__)

# menu before action, regardless of how the backend sorts the enum column
CATALOG_ORDER = (
    case((Permission.category == PermissionCategory.MENU, 0), else_=1),
    Permission.name,
)


async def list_permissions(db: AsyncSession) -> list[Permission]:
    """Full catalog, ordered by category then name."""
    stmt = select(Permission).order_by(*CATALOG_ORDER)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_permissions_for_role(role_id: int, db: AsyncSession) -> list[Permission]:
    await role_service.get_role(role_id, db)
    stmt = (
        select(Permission)
        .join(role_permissions, role_permissions.c.permission_id == Permission.id)
        .where(role_permissions.c.role_id == role_id)
        .order_by(*CATALOG_ORDER)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _resolve_permissions(permission_ids: set[int], db: AsyncSession) -> list[Permission]:
    if not permission_ids:
        return []
    stmt = select(Permission).where(Permission.id.in_(permission_ids))
    found = list((await db.execute(stmt)).scalars().all())
    unknown = sorted(permission_ids - {p.id for p in found})
    if unknown:
        raise InvalidPermissionSet(
            f"Unknown permission ids: {unknown}",
            unknown_ids=unknown,
        )
    return found


async def replace_role_permissions(
    role_id: int,
    permission_ids: Iterable[int],
    db: AsyncSession,
    *,
    expected_version: int | None = None,
    enforce_menu_dependency: bool | None = None,
) -> Role:
    """Atomically replace the role's permission set with `permission_ids`."""
    if enforce_menu_dependency is None:
        enforce_menu_dependency = settings.RBAC_ENFORCE_MENU_DEPENDENCY

    role = await role_service.get_role(role_id, db, for_update=True)
    if expected_version is not None and role.permissions_version != expected_version:
        raise VersionConflict(role_id, expected_version, role.permissions_version)

    wanted = set(permission_ids)
    permissions = await _resolve_permissions(wanted, db)

    if enforce_menu_dependency:
        try:
            missing = sorted(missing_menu_codes(p.code for p in permissions))
        except ValueError as exc:
            # a stored code outside the menu/action grammar
            raise InvalidPermissionSet(str(exc)) from exc
        if missing:
            raise InvalidPermissionSet(
                f"Action permissions require their menu permissions: {missing}",
                missing_menu_codes=missing,
            )

    await db.execute(delete(role_permissions).where(role_permissions.c.role_id == role_id))
    if wanted:
        await db.execute(
            insert(role_permissions),
            [{"role_id": role_id, "permission_id": pid} for pid in sorted(wanted)],
        )
    role.permissions_version += 1
    await db.flush()

    logger.info(
        "Role %s permissions replaced (%d permissions, version %d)",
        role_id,
        len(wanted),
        role.permissions_version,
    )
    return role
