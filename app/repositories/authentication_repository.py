"""인증 시도 레포지토리 — 실패한 로그인 기록 및 집계.

Authentication attempt repository — records failed credential checks and
counts them inside a time window for throttling.
"""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.authentication import FailedAuthenticationAttempt


class AuthenticationRepository:
    """failed_authentication_attempts 테이블 쿼리."""

    async def add_failed_attempt(
        self,
        db: AsyncSession,
        user_area_code: str,
        username: str,
        ip_address: str | None,
        attempt_date: datetime,
    ) -> None:
        """실패한 인증 시도를 기록합니다 (Record a failed attempt)."""
        db.add(
            FailedAuthenticationAttempt(
                user_area_code=user_area_code,
                username=username,
                ip_address=ip_address,
                attempt_date=attempt_date,
            )
        )
        await db.flush()

    async def count_by_ip(
        self,
        db: AsyncSession,
        ip_address: str,
        since: datetime,
    ) -> int:
        """since 이후 해당 IP의 실패 횟수."""
        query = select(func.count()).select_from(FailedAuthenticationAttempt).where(
            FailedAuthenticationAttempt.ip_address == ip_address,
            FailedAuthenticationAttempt.attempt_date > since,
        )
        return (await db.execute(query)).scalar() or 0

    async def count_by_username(
        self,
        db: AsyncSession,
        user_area_code: str,
        username: str,
        since: datetime,
    ) -> int:
        """since 이후 해당 영역/사용자명의 실패 횟수."""
        query = select(func.count()).select_from(FailedAuthenticationAttempt).where(
            FailedAuthenticationAttempt.user_area_code == user_area_code,
            FailedAuthenticationAttempt.username == username,
            FailedAuthenticationAttempt.attempt_date > since,
        )
        return (await db.execute(query)).scalar() or 0


# 싱글턴 인스턴스
authentication_repository: AuthenticationRepository = AuthenticationRepository()
