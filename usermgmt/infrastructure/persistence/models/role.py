"""Role ORM model. Table: roles."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from usermgmt.infrastructure.persistence.database import Base
from usermgmt.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin

if TYPE_CHECKING:
    from usermgmt.infrastructure.persistence.models.user import User


class Role(CuidMixin, TimestampMixin, Base):
    """Role with a unique name and an ordered list of permission strings."""

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Not loaded implicitly; use selectinload(Role.users) where needed.
    users: Mapped[list[User]] = relationship(
        back_populates="role", passive_deletes=True, lazy="raise"
    )
