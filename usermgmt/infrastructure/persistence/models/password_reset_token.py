"""Password reset token ORM model. Table: password_reset_tokens."""

from sqlalchemy import Boolean, text
from sqlalchemy.orm import Mapped, mapped_column

from usermgmt.infrastructure.persistence.database import Base
from usermgmt.infrastructure.persistence.models.mixins import TokenMixin


class PasswordResetToken(TokenMixin, Base):
    """Single-use token for the forgot-password flow. is_used only ever goes False -> True."""

    __tablename__ = "password_reset_tokens"

    is_used: Mapped[bool] = mapped_column(
        "isUsed", Boolean, nullable=False, default=False, server_default=text("false")
    )
