"""
User (principal) profile.

Identity lives with the external identity provider; this row only ties
the provider's subject id to at most ONE role.  A NULL `role_id` means
the empty permission set — not an error.  A role cannot be deleted while
any user still references it (enforced by the role service and by the
RESTRICT foreign key).
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from admin_rbac.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "users"

    email: Mapped[str | None] = mapped_column(String(256), unique=True, index=True, nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    role_id: Mapped[int | None] = mapped_column(
        ForeignKey("roles.id", ondelete="RESTRICT"),
        index=True,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<User {self.email or self.id}>"
