"""
Permission catalog controller.

Any authenticated principal may read the catalog — the admin dashboard
needs it to render the role editor.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from admin_rbac.core.database import get_db
from admin_rbac.rbac.dependencies import require_principal
from admin_rbac.schemas import PermissionOut
from admin_rbac.services import permission_service

router = APIRouter(prefix="/api", tags=["Permissions"])


@router.get("/permissions", response_model=list[PermissionOut])
async def list_permissions(
    principal_id: uuid.UUID = Depends(require_principal),
    db: AsyncSession = Depends(get_db),
):
    permissions = await permission_service.list_permissions(db)
    return [PermissionOut.model_validate(p) for p in permissions]
