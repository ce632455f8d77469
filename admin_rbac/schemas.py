"""
Pydantic schemas for request / response serialization.

Response models read ORM rows via `from_attributes`.  Request bodies
use the camelCase keys the admin dashboard sends; ids are `StrictInt`
so `"3"` is rejected rather than coerced.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from admin_rbac.models.permission import PermissionCategory


# ── Permission ───────────────────────────────────────────────────────
class PermissionOut(BaseModel):
    id: int
    code: str
    name: str
    description: str | None = None
    category: PermissionCategory

    model_config = {"from_attributes": True}


# ── Role ─────────────────────────────────────────────────────────────
class CreateRoleRequest(BaseModel):
    name: str = Field(min_length=1, max_length=64)
    description: str | None = Field(default=None, max_length=256)


class UpdateRoleRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=64)
    description: str | None = Field(default=None, max_length=256)


class RoleOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    permissions_version: int
    created_at: datetime

    model_config = {"from_attributes": True}


class ReplaceRolePermissionsRequest(BaseModel):
    permission_ids: list[StrictInt] = Field(alias="permissionIds")
    expected_version: StrictInt | None = Field(default=None, alias="expectedVersion")

    model_config = ConfigDict(populate_by_name=True)


class RoleUsageOut(BaseModel):
    role_id: int
    in_use: bool


class ReplaceRolePermissionsResponse(BaseModel):
    detail: str
    role: RoleOut


# ── User ─────────────────────────────────────────────────────────────
class AssignRoleRequest(BaseModel):
    role_id: StrictInt | None = Field(alias="roleId")

    model_config = ConfigDict(populate_by_name=True)


class UserOut(BaseModel):
    id: uuid.UUID
    email: str | None = None
    full_name: str | None = None
    role_id: int | None = None

    model_config = {"from_attributes": True}


# ── Profile ──────────────────────────────────────────────────────────
class ProfilePermissionsResponse(BaseModel):
    permissions: list[str]
    menu: list[str]
    actions: list[str]


# ── Generic ──────────────────────────────────────────────────────────
class MessageResponse(BaseModel):
    detail: str
