"""
Permission model.

Permissions are *immutable codes* from the static catalog
(`menu.products`, `action.products.edit`, ...).  They are seeded at
deploy time and referenced by role ↔ permission associations — never
created through normal request traffic.
"""

import enum

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from admin_rbac.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin


class PermissionCategory(str, enum.Enum):
    MENU = "menu"
    ACTION = "action"


class Permission(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "permissions"

    code: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(String(256), nullable=True)
    category: Mapped[PermissionCategory] = mapped_column(
        Enum(
            PermissionCategory,
            name="permission_category",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Permission {self.code}>"
