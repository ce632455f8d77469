"""
Role controller — role CRUD and whole-set permission assignment.

Every route uses `Depends(require_permission(...))` for enforcement.
Controllers are THIN — they delegate to services and return schemas.
Write routes commit before building the response, so a failed COMMIT
is a 500 and never a 2xx.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from admin_rbac.core.database import get_db
from admin_rbac.rbac.dependencies import require_permission
from admin_rbac.schemas import (
    CreateRoleRequest,
    MessageResponse,
    PermissionOut,
    ReplaceRolePermissionsRequest,
    ReplaceRolePermissionsResponse,
    RoleOut,
    RoleUsageOut,
    UpdateRoleRequest,
)
from admin_rbac.services import permission_service, role_service

router = APIRouter(prefix="/api/roles", tags=["Roles"])


# ── Roles ────────────────────────────────────────────────────────────
@router.get("", response_model=list[RoleOut])
async def list_roles(
    principal_id: uuid.UUID = Depends(require_permission("action.roles.view")),
    db: AsyncSession = Depends(get_db),
):
    roles = await role_service.list_roles(db)
    return [RoleOut.model_validate(r) for r in roles]


@router.post("", response_model=RoleOut, status_code=201)
async def create_role(
    body: CreateRoleRequest,
    principal_id: uuid.UUID = Depends(require_permission("action.roles.create")),
    db: AsyncSession = Depends(get_db),
):
    role = await role_service.create_role(body.name, body.description, db)
    await db.commit()
    return RoleOut.model_validate(role)


@router.get("/{role_id}", response_model=RoleOut)
async def get_role(
    role_id: int,
    principal_id: uuid.UUID = Depends(require_permission("action.roles.view")),
    db: AsyncSession = Depends(get_db),
):
    role = await role_service.get_role(role_id, db)
    return RoleOut.model_validate(role)


@router.patch("/{role_id}", response_model=RoleOut)
async def update_role(
    role_id: int,
    body: UpdateRoleRequest,
    principal_id: uuid.UUID = Depends(require_permission("action.roles.edit")),
    db: AsyncSession = Depends(get_db),
):
    role = await role_service.update_role(
        role_id,
        db,
        name=body.name,
        description=body.description,
    )
    await db.commit()
    return RoleOut.model_validate(role)


@router.delete("/{role_id}", response_model=MessageResponse)
async def delete_role(
    role_id: int,
    principal_id: uuid.UUID = Depends(require_permission("action.roles.delete")),
    db: AsyncSession = Depends(get_db),
):
    """Delete a role.  409 while any user still has it."""
    await role_service.delete_role(role_id, db)
    await db.commit()
    return MessageResponse(detail="Role deleted successfully")


@router.get("/{role_id}/usage", response_model=RoleUsageOut)
async def get_role_usage(
    role_id: int,
    principal_id: uuid.UUID = Depends(require_permission("action.roles.view")),
    db: AsyncSession = Depends(get_db),
):
    await role_service.get_role(role_id, db)
    in_use = await role_service.is_role_in_use(role_id, db)
    return RoleUsageOut(role_id=role_id, in_use=in_use)


# ── Role ↔ Permission ────────────────────────────────────────────────
@router.get("/{role_id}/permissions", response_model=list[PermissionOut])
async def list_role_permissions(
    role_id: int,
    principal_id: uuid.UUID = Depends(require_permission("action.roles.view")),
    db: AsyncSession = Depends(get_db),
):
    permissions = await permission_service.list_permissions_for_role(role_id, db)
    return [PermissionOut.model_validate(p) for p in permissions]


@router.put("/{role_id}/permissions", response_model=ReplaceRolePermissionsResponse)
async def replace_role_permissions(
    role_id: int,
    body: ReplaceRolePermissionsRequest,
    principal_id: uuid.UUID = Depends(require_permission("action.roles.edit")),
    db: AsyncSession = Depends(get_db),
):
    """Replace the role's permission set.  Pass `expectedVersion` for compare-and-swap."""
    role = await permission_service.replace_role_permissions(
        role_id,
        body.permission_ids,
        db,
        expected_version=body.expected_version,
    )
    await db.commit()
    return ReplaceRolePermissionsResponse(
        detail="Permissions updated successfully",
        role=RoleOut.model_validate(role),
    )
