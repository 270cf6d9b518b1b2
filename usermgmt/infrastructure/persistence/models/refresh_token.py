"""Refresh token ORM model. Table: refresh_tokens."""

from sqlalchemy import Boolean, text
from sqlalchemy.orm import Mapped, mapped_column

from usermgmt.infrastructure.persistence.database import Base
from usermgmt.infrastructure.persistence.models.mixins import TokenMixin


class RefreshToken(TokenMixin, Base):
    """Long-lived credential-renewal capability. is_revoked only ever goes False -> True."""

    __tablename__ = "refresh_tokens"

    is_revoked: Mapped[bool] = mapped_column(
        "isRevoked", Boolean, nullable=False, default=False, server_default=text("false")
    )
