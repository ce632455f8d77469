"""
Declarative base and column mixins.

- Roles and permissions use integer ids (they are referenced by id in
  the admin API payloads, e.g. `permissionIds: [1, 2, 3]`).
- Users use a UUID id — it is the subject issued by the identity
  provider.
- Every table gets `created_at` / `updated_at` timestamps (UTC).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    """UTC `created_at` / `updated_at`, set client-side with a server fallback."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class IntegerPrimaryKeyMixin:
    """Adds an auto-incrementing integer `id` primary key."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)


class UUIDPrimaryKeyMixin:
    """Principal id issued by the identity provider."""

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
