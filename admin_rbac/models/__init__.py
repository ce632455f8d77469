"""
Models package — import every model so SQLAlchemy's Base.metadata
knows about all tables (critical for `create_all` / Alembic).
"""

from admin_rbac.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin, UUIDPrimaryKeyMixin
from admin_rbac.models.permission import Permission, PermissionCategory
from admin_rbac.models.role import Role, role_permissions
from admin_rbac.models.user import User

__all__ = [
    "Base",
    "IntegerPrimaryKeyMixin",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "Permission",
    "PermissionCategory",
    "Role",
    "role_permissions",
    "User",
]
