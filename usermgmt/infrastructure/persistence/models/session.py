"""Session ORM model. Table: sessions."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from usermgmt.infrastructure.persistence.database import Base
from usermgmt.infrastructure.persistence.models.mixins import TokenMixin
from usermgmt.shared.utils.datetime import utc_now


class UserSession(TokenMixin, Base):
    """Live authenticated browser/device context. No one-way flag: ended by deletion."""

    __tablename__ = "sessions"

    ip_address: Mapped[str | None] = mapped_column("ipAddress", String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column("userAgent", Text, nullable=True)
    last_activity_at: Mapped[datetime] = mapped_column(
        "lastActivityAt", DateTime(timezone=True), nullable=False, default=utc_now
    )
