"""
RBAC dependencies — the FastAPI face of the access guard.

`require_permission` is a *dependency factory*: call it with one or
more permission codes and it returns a dependency that will

1. resolve the principal from the bearer token (none → 401),
2. run `AccessGuard.authorize` with a request-scoped evaluator,
3. return the principal id, or raise 403 naming the missing code.

A store failure during step 2 surfaces as 500, never as 403.

Usage in a route:
    @router.delete("/roles/{role_id}")
    async def delete_role(
        role_id: int,
        principal_id: uuid.UUID = Depends(require_permission("action.roles.delete")),
        ...
    ): ...
"""

import uuid

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from admin_rbac.core.database import get_db
from admin_rbac.core.security import get_current_principal_id
from admin_rbac.rbac.errors import Unauthenticated
from admin_rbac.rbac.evaluator import PermissionEvaluator
from admin_rbac.rbac.guard import AccessGuard


def get_evaluator(db: AsyncSession = Depends(get_db)) -> PermissionEvaluator:
    return PermissionEvaluator(db)


def get_access_guard(evaluator: PermissionEvaluator = Depends(get_evaluator)) -> AccessGuard:
    return AccessGuard(evaluator)


async def require_principal(
    principal_id: uuid.UUID | None = Depends(get_current_principal_id),
) -> uuid.UUID:
    """Authentication only — no permission check."""
    if principal_id is None:
        raise Unauthenticated()
    return principal_id


class require_permission:
    """
    Dependency factory.

    Can be used as:
        Depends(require_permission("action.roles.view"))
        Depends(require_permission("action.orders.view", "action.orders.manage", require_all=False))
    """

    def __init__(self, *permission_codes: str, require_all: bool = True):
        if not permission_codes:
            raise ValueError("At least one permission code is required")
        self.required_codes = permission_codes
        self.require_all = require_all

    async def __call__(
        self,
        principal_id: uuid.UUID | None = Depends(get_current_principal_id),
        guard: AccessGuard = Depends(get_access_guard),
    ) -> uuid.UUID:
        return await guard.authorize(principal_id, *self.required_codes, require_all=self.require_all)
