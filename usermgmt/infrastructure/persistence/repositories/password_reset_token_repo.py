"""Password reset token repository (one-way flag: is_used).

Reset tokens are single-use: redeem them with ``consume`` so that two
concurrent redemptions of the same token cannot both succeed.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from usermgmt.application.dtos.token import PasswordResetTokenResult
from usermgmt.infrastructure.persistence.models import PasswordResetToken
from usermgmt.infrastructure.persistence.repositories.mappers import (
    password_reset_token_to_result,
)
from usermgmt.infrastructure.persistence.repositories.token_repo import TokenRepository
from usermgmt.shared.enums import EntityType


class PasswordResetTokenRepository(
    TokenRepository[PasswordResetToken, PasswordResetTokenResult]
):
    entity_type = EntityType.PASSWORD_RESET_TOKEN.value
    retired_flag = "is_used"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, PasswordResetToken)

    def _to_result(self, obj: PasswordResetToken) -> PasswordResetTokenResult:
        return password_reset_token_to_result(obj)

    async def invalidate_all_for_user(self, user_id: str) -> int:
        """Mark every unused reset token of the user as used."""
        return await self.revoke_all_for_user(user_id)
