"""리프레시 토큰 레포지토리.

Refresh token repository — rows behind "remember me" sessions. Expiry is
compared inside SQL so the check does not depend on how the driver
returns timezone information.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.token import RefreshToken
from app.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """refresh_tokens 테이블 쿼리."""

    def __init__(self) -> None:
        super().__init__(RefreshToken)

    async def add(
        self,
        db: AsyncSession,
        user_id: UUID,
        token: str,
        expires_at: datetime,
    ) -> RefreshToken:
        """세션 토큰을 저장합니다 (Persist the refresh token issued at sign-in)."""
        return await self.create(db, {"user_id": user_id, "token": token, "expires_at": expires_at})

    async def get_valid(
        self,
        db: AsyncSession,
        token: str,
        now: datetime,
    ) -> RefreshToken | None:
        """만료되지 않은 토큰 행을 조회합니다.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            token: 리프레시 토큰 문자열 (Refresh token string)
            now: 만료 비교 기준 시각 (Reference time for the expiry check)

        Returns:
            RefreshToken | None: 유효한 토큰 행 또는 None (Valid row or None)
        """
        result = await db.execute(
            select(RefreshToken).where(RefreshToken.token == token, RefreshToken.expires_at > now)
        )
        return result.scalar_one_or_none()

    async def revoke(self, db: AsyncSession, token: str) -> bool:
        """토큰 하나를 폐기합니다 (False when the token was not stored)."""
        result = await db.execute(delete(RefreshToken).where(RefreshToken.token == token))
        await db.flush()
        return (result.rowcount or 0) > 0

    async def revoke_all_for_user(self, db: AsyncSession, user_id: UUID) -> None:
        """사용자의 모든 세션을 폐기합니다 (after a password change or recovery)."""
        await db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
refresh_token_repository: RefreshTokenRepository = RefreshTokenRepository()
