"""인증 검증 서비스 — 자격 증명 검증 및 인증 시도 제한.

Authentication Service — Credential validation and attempt throttling.
Failed checks are recorded and committed immediately so that they count
towards the throttling limits even though the surrounding request fails.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.cqs.base import ExecutionContext
from app.models.user import User
from app.repositories.authentication_repository import authentication_repository
from app.repositories.user_repository import normalize_username, user_repository
from app.schemas.auth import (
    HasExceededMaxAuthenticationAttemptsQuery,
    UserCredentialsValidationResult,
    ValidateUserCredentialsQuery,
    ValidatedUserSummary,
)
from app.schemas.common import ValidationErrorDetail
from app.user_areas import AuthenticationOptions, user_area_repository
from app.utils import validation_errors
from app.utils.password import needs_rehash, verify_password

logger = logging.getLogger(__name__)


class AuthenticationService:
    """자격 증명 검증 및 인증 시도 제한 서비스.

    Service validating credentials and enforcing attempt limits.
    """

    async def has_exceeded_max_attempts(
        self,
        db: AsyncSession,
        query: HasExceededMaxAuthenticationAttemptsQuery,
        context: ExecutionContext,
    ) -> bool:
        """인증 시도 한도를 초과했는지 확인합니다.

        Check the failed attempts recorded inside the user area's window
        against the per-IP and per-username limits. A limit of zero or
        less disables that check.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            query: 조회 조건 (Area, username and IP address)
            context: 실행 컨텍스트 (execution_date is the window end)

        Returns:
            bool: 한도 초과 여부 (True when either limit is reached)
        """
        options: AuthenticationOptions = user_area_repository.get_options_by_code(
            query.user_area_code
        ).authentication
        since: datetime = context.execution_date - timedelta(minutes=options.window_minutes)

        if query.ip_address and options.ip_max_attempts > 0:
            ip_count: int = await authentication_repository.count_by_ip(db, query.ip_address, since)
            if ip_count >= options.ip_max_attempts:
                return True

        if options.username_max_attempts > 0:
            username_count: int = await authentication_repository.count_by_username(
                db, query.user_area_code, normalize_username(query.username), since
            )
            if username_count >= options.username_max_attempts:
                return True

        return False

    async def validate_user_credentials(
        self,
        db: AsyncSession,
        query: ValidateUserCredentialsQuery,
        context: ExecutionContext,
    ) -> UserCredentialsValidationResult:
        """사용자 자격 증명을 검증합니다.

        Validate a username/password pair for a user area.

        Order:
            1. 시도 한도 초과 → too-many-failed-attempts
               (Throttled callers fail without touching the password)
            2. 사용자 없음 / 비활성 / 비밀번호 불일치 → 실패 기록 후 invalid-credentials
               (Unknown, inactive or wrong password: record the attempt)
            3. 성공 → 사용자 요약 (Success with the user summary)

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            query: 검증할 자격 증명 (Credentials to validate)
            context: 실행 컨텍스트 (Execution context, supplies the IP address)

        Returns:
            UserCredentialsValidationResult: 검증 결과 (Validation outcome)
        """
        exceeded: bool = await self.has_exceeded_max_attempts(
            db,
            HasExceededMaxAuthenticationAttemptsQuery(
                user_area_code=query.user_area_code,
                username=query.username,
                ip_address=context.ip_address,
            ),
            context,
        )
        if exceeded:
            logger.info("Sign-in throttled for %s/%s", query.user_area_code, query.username)
            return self._failure(validation_errors.TOO_MANY_FAILED_ATTEMPTS, query.property_to_validate)

        user: User | None = await user_repository.get_by_username(db, query.user_area_code, query.username)
        if user is None or not user.is_active or not verify_password(query.password, user.password_hash):
            await authentication_repository.add_failed_attempt(
                db,
                user_area_code=query.user_area_code,
                username=normalize_username(query.username),
                ip_address=context.ip_address,
                attempt_date=context.execution_date,
            )
            # 요청이 실패해도 시도 기록은 유지 — The attempt must survive the failed request
            await db.commit()
            logger.info("Failed sign-in for %s/%s", query.user_area_code, query.username)
            return self._failure(validation_errors.INVALID_CREDENTIALS, query.property_to_validate)

        return UserCredentialsValidationResult(
            is_success=True,
            user=ValidatedUserSummary(
                user_id=user.id,
                user_area_code=user.user_area_code,
                role_id=user.role_id,
                require_password_change=user.require_password_change,
                is_account_verified=user.is_account_verified,
                password_rehash_needed=needs_rehash(user.password_hash),
            ),
        )

    def _failure(
        self,
        error: validation_errors.ErrorDefinition,
        property_name: str,
    ) -> UserCredentialsValidationResult:
        return UserCredentialsValidationResult(
            is_success=False,
            error=ValidationErrorDetail.from_exception(validation_errors.build(error, property_name)),
        )


# 싱글턴 인스턴스 — Singleton instance
authentication_service: AuthenticationService = AuthenticationService()
