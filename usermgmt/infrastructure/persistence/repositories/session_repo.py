"""Session repository. Sessions have no one-way flag: they end by deletion."""

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from usermgmt.application.dtos.token import SessionResult
from usermgmt.infrastructure.persistence.models import UserSession
from usermgmt.infrastructure.persistence.repositories.mappers import session_to_result
from usermgmt.infrastructure.persistence.repositories.token_repo import (
    TokenRepository,
    mask_token,
)
from usermgmt.shared.enums import EntityType
from usermgmt.shared.utils.datetime import utc_now


class SessionRepository(TokenRepository[UserSession, SessionResult]):
    entity_type = EntityType.SESSION.value
    retired_flag = None

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, UserSession)

    def _to_result(self, obj: UserSession) -> SessionResult:
        return session_to_result(obj)

    async def touch(self, token: str) -> SessionResult:
        """Record activity on a session (last_activity_at = now).

        Raises:
            ResourceNotFoundException: no session with this token.
        """
        affected = await self._execute_write(
            update(UserSession)
            .where(UserSession.token == token)
            .values(last_activity_at=utc_now())
        )
        found = await self.find_by_token(token) if affected else None
        if found is None:
            raise self._not_found(mask_token(token))
        return found
