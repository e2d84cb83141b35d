"""인증 서비스 — 로그인, 토큰 갱신, 로그아웃, 비밀번호 변경 비즈니스 로직.

Auth Service — Business logic for credential sign-in, token refresh,
sign-out, the current user and password changes by credentials.
"""

import logging
from datetime import datetime, timedelta
from uuid import UUID

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.cqs.base import ExecutionContext
from app.cqs.mediator import mediator
from app.models.authentication import ACCOUNT_RECOVERY_TASK_TYPE
from app.models.user import User
from app.repositories.refresh_token_repository import refresh_token_repository
from app.repositories.permission_repository import permission_repository
from app.repositories.user_repository import user_repository
from app.schemas.auth import (
    GetCurrentUserQuery,
    InvalidateAuthorizedTaskBatchCommand,
    RefreshTokensCommand,
    SignInUserWithCredentialsCommand,
    SignOutCommand,
    TokenResponse,
    UpdateUserPasswordByCredentialsCommand,
    UserCredentialsValidationResult,
    UserMeResponse,
    ValidateUserCredentialsQuery,
    ValidatedUserSummary,
)
from app.services.authentication_service import authentication_service
from app.user_areas import UserAreaOptions, user_area_repository
from app.utils import validation_errors
from app.utils.exceptions import NotFoundError, UnauthorizedError
from app.utils.jwt import (
    REFRESH_TOKEN_TYPE,
    build_claims,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from app.utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    """

    async def _generate_tokens(
        self,
        db: AsyncSession,
        user: User,
        remember_user: bool,
        now: datetime,
    ) -> TokenResponse:
        """액세스 토큰과 (선택적으로) 리프레시 토큰을 생성합니다.

        Generate an access token, and a persisted refresh token when the
        user asked to be remembered.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user: 사용자 모델 (User model instance)
            remember_user: 리프레시 토큰 발급 여부 (Whether to issue a refresh token)
            now: 기준 시각 (Reference time for the refresh token expiry)

        Returns:
            TokenResponse: 토큰 응답 (Token response)
        """
        claims: dict[str, str] = build_claims(user.id, user.user_area_code, user.role_id)
        access_token: str = create_access_token(claims)
        if not remember_user:
            return TokenResponse(access_token=access_token)

        refresh_token: str = create_refresh_token(claims)
        # 리프레시 토큰을 DB에 저장 — Persist refresh token to database
        expires_at: datetime = now + timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
        await refresh_token_repository.add(
            db, user_id=user.id, token=refresh_token, expires_at=expires_at
        )
        return TokenResponse(access_token=access_token, refresh_token=refresh_token)

    async def _get_user(self, db: AsyncSession, user_id: UUID) -> User:
        user: User | None = await user_repository.get_detail(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def sign_in_with_credentials(
        self,
        db: AsyncSession,
        command: SignInUserWithCredentialsCommand,
        context: ExecutionContext,
    ) -> TokenResponse:
        """자격 증명으로 로그인합니다.

        Sign a user in with username and password.

        Order:
            1. 자격 증명 검증, 실패 시 예외 (Validate credentials, raise on failure)
            2. 비밀번호 변경 필요 → 필요하면 재해싱 후 차단
               (Password change required: rehash when needed, then block)
            3. 영역이 인증을 요구하는데 미인증 → 차단
               (Unverified account in an area requiring verification: block)
            4. 계정 복구 작업 무효화 (Invalidate pending account recovery tasks)
            5. 세션 수립 — 마지막 로그인 일시, 토큰 발급
               (Establish the session: last sign-in date and tokens)

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            command: 로그인 커맨드 (Sign-in command)
            context: 실행 컨텍스트 (Execution context)

        Returns:
            TokenResponse: 토큰 응답 (Token response)

        Raises:
            ValidationError: 자격 증명 오류, 시도 한도 초과, 비밀번호 변경 필요, 미인증 계정
                             (Invalid credentials, throttled, password change required, not verified)
        """
        result: UserCredentialsValidationResult = await authentication_service.validate_user_credentials(
            db,
            ValidateUserCredentialsQuery(
                user_area_code=command.user_area_code,
                username=command.username,
                password=command.password,
            ),
            context,
        )
        result.throw_if_not_success()
        summary: ValidatedUserSummary = result.user

        if summary.require_password_change:
            # 로그인은 차단하지만 약한 해시는 지금 갱신 — Blocked, but the hash is still upgraded
            if summary.password_rehash_needed:
                await self._rehash_password(db, summary.user_id, command.password)
                await db.commit()
            raise validation_errors.build(validation_errors.PASSWORD_CHANGE_REQUIRED, "password")

        options: UserAreaOptions = user_area_repository.get_options_by_code(command.user_area_code)
        if options.account_verification.require_verification and not summary.is_account_verified:
            raise validation_errors.build(validation_errors.ACCOUNT_NOT_VERIFIED, "username")

        await mediator.execute(
            db,
            InvalidateAuthorizedTaskBatchCommand(
                user_id=summary.user_id,
                task_type=ACCOUNT_RECOVERY_TASK_TYPE,
            ),
            context,
        )

        if summary.password_rehash_needed:
            await self._rehash_password(db, summary.user_id, command.password)

        user: User = await self._get_user(db, summary.user_id)
        user.last_sign_in_at = context.execution_date
        await db.flush()

        logger.info("User %s signed in to %s", user.id, user.user_area_code)
        return await self._generate_tokens(db, user, command.remember_user, context.execution_date)

    async def _rehash_password(self, db: AsyncSession, user_id: UUID, password: str) -> None:
        user: User = await self._get_user(db, user_id)
        user.password_hash = hash_password(password)
        await db.flush()
        logger.info("Password hash upgraded for user %s", user_id)

    async def refresh_tokens(
        self,
        db: AsyncSession,
        command: RefreshTokensCommand,
        context: ExecutionContext,
    ) -> TokenResponse:
        """리프레시 토큰으로 새 토큰 쌍을 발급합니다.

        Issue a new token pair using a refresh token. The used refresh
        token is revoked (rotation).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            command: 리프레시 커맨드 (Refresh command)
            context: 실행 컨텍스트 (Execution context)

        Returns:
            TokenResponse: 새 토큰 응답 (New token response)

        Raises:
            UnauthorizedError: 유효하지 않거나 만료된 리프레시 토큰일 때
                               (Invalid or expired refresh token)
        """
        try:
            payload: dict = decode_token(command.refresh_token)
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Invalid refresh token")
        if payload.get("type") != REFRESH_TOKEN_TYPE:
            raise UnauthorizedError("Invalid token type")

        # DB에서 리프레시 토큰 확인 — Verify refresh token in database
        db_token = await refresh_token_repository.get_valid(
            db, command.refresh_token, context.execution_date
        )
        if db_token is None:
            raise UnauthorizedError("Invalid refresh token")

        user: User | None = await user_repository.get_detail(db, db_token.user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError("User not found or inactive")

        await refresh_token_repository.revoke(db, command.refresh_token)
        return await self._generate_tokens(db, user, True, context.execution_date)

    async def sign_out(
        self,
        db: AsyncSession,
        command: SignOutCommand,
        context: ExecutionContext,
    ) -> None:
        """로그아웃 — 리프레시 토큰 폐기 (Revoke the refresh token)."""
        await refresh_token_repository.revoke(db, command.refresh_token)

    async def get_current_user(
        self,
        db: AsyncSession,
        query: GetCurrentUserQuery,
        context: ExecutionContext,
    ) -> UserMeResponse | None:
        """현재 사용자 프로필을 조회합니다. 익명이면 None.

        Return the caller's profile with permission codes, or None for
        anonymous callers.
        """
        if context.user_id is None:
            return None
        user: User | None = await user_repository.get_detail(db, context.user_id)
        if user is None:
            return None

        permissions: set[str] = await permission_repository.get_permissions_by_role_id(db, user.role_id)
        return UserMeResponse(
            id=str(user.id),
            user_area_code=user.user_area_code,
            username=user.username,
            email=user.email,
            display_name=user.display_name,
            role_id=str(user.role_id),
            role_title=user.role.title,
            is_account_verified=user.is_account_verified,
            permissions=sorted(permissions),
        )

    async def update_password_by_credentials(
        self,
        db: AsyncSession,
        command: UpdateUserPasswordByCredentialsCommand,
        context: ExecutionContext,
    ) -> None:
        """현재 자격 증명으로 비밀번호를 변경합니다.

        Change a password by supplying the current one. This is how users
        blocked by require_password_change get back in.

        Raises:
            ValidationError: 자격 증명 오류 또는 동일한 비밀번호
                             (Invalid credentials or unchanged password)
        """
        result: UserCredentialsValidationResult = await authentication_service.validate_user_credentials(
            db,
            ValidateUserCredentialsQuery(
                user_area_code=command.user_area_code,
                username=command.username,
                password=command.old_password,
                property_to_validate="old_password",
            ),
            context,
        )
        result.throw_if_not_success()

        user: User = await self._get_user(db, result.user.user_id)
        if verify_password(command.new_password, user.password_hash):
            raise validation_errors.build(validation_errors.PASSWORD_NOT_CHANGED, "new_password")

        user.password_hash = hash_password(command.new_password)
        user.require_password_change = False
        user.last_password_change_at = context.execution_date
        await refresh_token_repository.revoke_all_for_user(db, user.id)
        await db.flush()
        logger.info("Password changed for user %s", user.id)


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
