"""SQLAlchemy mixins for common model patterns.

Provides: CuidMixin, CreatedAtMixin, TimestampMixin, and TokenMixin (the
columns shared by sessions, refresh tokens and password-reset tokens).

Column names follow the persisted field names (camelCase); Python
attributes stay snake_case.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from usermgmt.shared.utils.datetime import utc_now
from usermgmt.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String(32), primary_key=True, default=generate_cuid)


class CreatedAtMixin:
    """Mixin for createdAt (set in Python for sub-second ordering, server default as backstop)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            "createdAt",
            DateTime(timezone=True),
            default=utc_now,
            server_default=func.now(),
            nullable=False,
            index=True,
        )


class TimestampMixin(CreatedAtMixin):
    """Mixin for createdAt and updatedAt."""

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            "updatedAt",
            DateTime(timezone=True),
            default=utc_now,
            onupdate=utc_now,
            server_default=func.now(),
            nullable=False,
        )


class TokenMixin(CuidMixin, CreatedAtMixin):
    """Columns shared by token-like entities: unique token, owning user, expiry.

    Rows are removed with their user (ON DELETE CASCADE).
    """

    @declared_attr
    def token(cls) -> Mapped[str]:
        return mapped_column(String(255), unique=True, nullable=False, index=True)

    @declared_attr
    def user_id(cls) -> Mapped[str]:
        return mapped_column(
            "userId",
            String(32),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    @declared_attr
    def expires_at(cls) -> Mapped[datetime]:
        return mapped_column(
            "expiresAt", DateTime(timezone=True), nullable=False, index=True
        )
