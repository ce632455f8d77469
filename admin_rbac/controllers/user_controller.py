"""
User controller — role assignment for principals.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from admin_rbac.core.database import get_db
from admin_rbac.rbac.dependencies import require_permission
from admin_rbac.schemas import AssignRoleRequest, UserOut
from admin_rbac.services import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: uuid.UUID,
    principal_id: uuid.UUID = Depends(require_permission("action.users.view")),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.get_user_by_id(user_id, db)
    return UserOut.model_validate(user)


@router.put("/{user_id}/role", response_model=UserOut)
async def assign_role(
    user_id: uuid.UUID,
    body: AssignRoleRequest,
    principal_id: uuid.UUID = Depends(require_permission("action.users.edit")),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.assign_role(user_id, body.role_id, db)
    await db.commit()
    return UserOut.model_validate(user)
