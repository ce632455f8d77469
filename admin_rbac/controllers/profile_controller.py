"""
Profile controller — the caller's own resolved permission codes.

This is the endpoint the client-side permission cache polls.  An
unauthenticated caller gets a 401 JSON body; a store failure gets an
opaque 500 — never an empty list, which the UI would read as "no
permissions".
"""

import uuid

from fastapi import APIRouter, Depends

from admin_rbac.rbac.catalog import action_permissions, menu_permissions
from admin_rbac.rbac.dependencies import get_evaluator, require_principal
from admin_rbac.rbac.evaluator import PermissionEvaluator
from admin_rbac.schemas import ProfilePermissionsResponse

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get("/permissions", response_model=ProfilePermissionsResponse)
async def my_permissions(
    principal_id: uuid.UUID = Depends(require_principal),
    evaluator: PermissionEvaluator = Depends(get_evaluator),
):
    codes = await evaluator.evaluate_permissions(principal_id)
    return ProfilePermissionsResponse(
        permissions=sorted(codes),
        menu=sorted(menu_permissions(codes)),
        actions=sorted(action_permissions(codes)),
    )
