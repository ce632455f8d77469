"""
Role model & the role ↔ permission association table.

`role_permissions` is a plain association table (no extra columns).  It
is only ever rewritten as a whole set per role, never patched.  Every
rewrite bumps `Role.permissions_version`, which doubles as the
compare-and-swap token for optimistic updates.

No ORM relationships: the evaluator and the services query the
association table with explicit joins.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column

from admin_rbac.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin

# ── Association table ────────────────────────────────────────────────
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(256), nullable=True)
    permissions_version: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    def __repr__(self) -> str:
        return f"<Role {self.name}>"
