"""
Permission evaluator — who holds which codes.

Resolution path (one typed join, no relationship traversal):

    users.role_id → role_permissions.role_id
                  → role_permissions.permission_id → permissions.code

A principal with no role, or with no profile row at all, holds the
empty set.  Store failures are raised as `EvaluationError` so callers
can tell an outage apart from a denial.
"""

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from admin_rbac.models.permission import Permission, PermissionCategory
from admin_rbac.models.role import role_permissions
from admin_rbac.models.user import User
from admin_rbac.rbac.catalog import action_permissions, menu_permissions
from admin_rbac.rbac.errors import EvaluationError

logger = logging.getLogger("rbac")

__all__ = [
    "GrantedPermission",
    "PermissionEvaluator",
    "action_permissions",
    "menu_permissions",
]


@dataclass(frozen=True)
class GrantedPermission:
    code: str
    category: PermissionCategory




class PermissionEvaluator:
    """Read-only queries against the permission store.  Safe to call concurrently."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _granted(self, principal_id: uuid.UUID, *columns):
        return (
            select(*columns)
            .select_from(User)
            .join(role_permissions, role_permissions.c.role_id == User.role_id)
            .join(Permission, Permission.id == role_permissions.c.permission_id)
            .where(User.id == principal_id)
        )

    async def evaluate_permission_details(self, principal_id: uuid.UUID) -> list[GrantedPermission]:
        stmt = self._granted(principal_id, Permission.code, Permission.category).order_by(Permission.code)
        try:
            rows = (await self.db.execute(stmt)).all()
        except (SQLAlchemyError, LookupError) as exc:
            # LookupError: a stored category outside PermissionCategory
            raise EvaluationError(f"Failed to evaluate permissions for {principal_id}") from exc
        return [GrantedPermission(code=code, category=category) for code, category in rows]

    async def evaluate_permissions(self, principal_id: uuid.UUID) -> frozenset[str]:
        """Every permission code carried by the principal's role."""
        details = await self.evaluate_permission_details(principal_id)
        return frozenset(detail.code for detail in details)

    async def has_permission(self, principal_id: uuid.UUID, code: str) -> bool:
        """Targeted EXISTS — does not materialise the whole set."""
        stmt = select(
            exists()
            .where(User.id == principal_id)
            .where(role_permissions.c.role_id == User.role_id)
            .where(Permission.id == role_permissions.c.permission_id)
            .where(Permission.code == code)
        )
        try:
            return bool((await self.db.execute(stmt)).scalar())
        except SQLAlchemyError as exc:
            raise EvaluationError(f"Failed to check {code} for {principal_id}") from exc

    async def granted_among(self, principal_id: uuid.UUID, codes: Iterable[str]) -> frozenset[str]:
        """The subset of `codes` the principal holds, in one IN query."""
        wanted = set(codes)
        if not wanted:
            return frozenset()
        stmt = self._granted(principal_id, Permission.code).where(Permission.code.in_(wanted))
        try:
            return frozenset((await self.db.execute(stmt)).scalars().all())
        except SQLAlchemyError as exc:
            raise EvaluationError(f"Failed to check {sorted(wanted)} for {principal_id}") from exc

    async def has_any_permission(self, principal_id: uuid.UUID, codes: Iterable[str]) -> bool:
        return bool(await self.granted_among(principal_id, codes))

    async def has_all_permissions(self, principal_id: uuid.UUID, codes: Iterable[str]) -> bool:
        """True for an empty `codes`, like `all([])`."""
        wanted = set(codes)
        return await self.granted_among(principal_id, wanted) == wanted
