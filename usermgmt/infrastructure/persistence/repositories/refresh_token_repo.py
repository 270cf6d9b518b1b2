"""Refresh token repository (one-way flag: is_revoked)."""

from sqlalchemy.ext.asyncio import AsyncSession

from usermgmt.application.dtos.token import RefreshTokenResult
from usermgmt.infrastructure.persistence.models import RefreshToken
from usermgmt.infrastructure.persistence.repositories.mappers import (
    refresh_token_to_result,
)
from usermgmt.infrastructure.persistence.repositories.token_repo import TokenRepository
from usermgmt.shared.enums import EntityType


class RefreshTokenRepository(TokenRepository[RefreshToken, RefreshTokenResult]):
    entity_type = EntityType.REFRESH_TOKEN.value
    retired_flag = "is_revoked"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, RefreshToken)

    def _to_result(self, obj: RefreshToken) -> RefreshTokenResult:
        return refresh_token_to_result(obj)
