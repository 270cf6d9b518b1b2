"""User ORM model. Table: users."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from usermgmt.infrastructure.persistence.database import Base
from usermgmt.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin

if TYPE_CHECKING:
    from usermgmt.infrastructure.persistence.models.role import Role


class User(CuidMixin, TimestampMixin, Base):
    """User account. Unique email; role is required and loaded with the user.

    Soft delete sets is_active to False; the row stays queryable.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column("password", String(255), nullable=False)
    first_name: Mapped[str] = mapped_column("firstName", String(100), nullable=False)
    last_name: Mapped[str] = mapped_column("lastName", String(100), nullable=False)
    role_id: Mapped[str] = mapped_column(
        "roleId", String(32), ForeignKey("roles.id"), nullable=False, index=True
    )
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    avatar: Mapped[str | None] = mapped_column(String(512), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        "isActive", Boolean, nullable=False, default=True, server_default=text("true")
    )

    role: Mapped[Role] = relationship(back_populates="users", lazy="selectin")
