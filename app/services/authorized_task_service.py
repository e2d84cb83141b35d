"""인가 작업 서비스 — 계정 복구 및 계정 인증 흐름.

Authorized Task Service — account recovery and account verification.
Both flows email the user a link with a random single-use token. A task
can be used while it is neither completed, invalidated nor expired.
"""

import logging
import secrets
from datetime import datetime, timedelta
from urllib.parse import urlencode

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.cqs.base import ExecutionContext
from app.models.authentication import (
    ACCOUNT_RECOVERY_TASK_TYPE,
    ACCOUNT_VERIFICATION_TASK_TYPE,
    AuthorizedTask,
)
from app.models.user import User
from app.repositories.refresh_token_repository import refresh_token_repository
from app.repositories.authorized_task_repository import authorized_task_repository
from app.repositories.user_repository import user_repository
from app.schemas.auth import (
    AuthorizedTaskTokenValidationResult,
    CompleteUserAccountRecoveryCommand,
    CompleteUserAccountVerificationCommand,
    InitiateUserAccountRecoveryViaEmailCommand,
    InitiateUserAccountVerificationViaEmailCommand,
    InvalidateAuthorizedTaskBatchCommand,
    ValidateAuthorizedTaskTokenQuery,
)
from app.schemas.common import ValidationErrorDetail
from app.utils import validation_errors
from app.utils.email import send_email
from app.utils.exceptions import NotFoundError
from app.utils.password import hash_password
from app.utils.timezone import ensure_utc

logger = logging.getLogger(__name__)


class AuthorizedTaskService:
    """토큰 기반 인가 작업 서비스.

    Service for token based single-use tasks.
    """

    async def invalidate_batch(
        self,
        db: AsyncSession,
        command: InvalidateAuthorizedTaskBatchCommand,
        context: ExecutionContext,
    ) -> None:
        """사용자의 열린 작업을 유형별로 무효화합니다.

        Mark every open task of the type as invalidated.
        """
        count: int = await authorized_task_repository.invalidate_open_tasks(
            db, command.user_id, command.task_type, context.execution_date
        )
        if count:
            logger.debug("Invalidated %d %s task(s) for user %s", count, command.task_type, command.user_id)

    async def validate_token(
        self,
        db: AsyncSession,
        query: ValidateAuthorizedTaskTokenQuery,
        context: ExecutionContext,
    ) -> AuthorizedTaskTokenValidationResult:
        """작업 토큰을 검증합니다.

        Validate a task token. Unknown, completed, invalidated tokens and
        tokens of another task type are reported as invalid; expired
        tokens as expired.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            query: 토큰과 작업 유형 (Token and task type)
            context: 실행 컨텍스트 (execution_date is "now")

        Returns:
            AuthorizedTaskTokenValidationResult: 검증 결과 (Validation outcome)
        """
        task: AuthorizedTask | None = await authorized_task_repository.get_by_token(db, query.token)
        if (
            task is None
            or task.task_type != query.task_type
            or task.completed_at is not None
            or task.invalidated_at is not None
        ):
            return self._failure(validation_errors.TOKEN_INVALID)
        if ensure_utc(task.expires_at) <= context.execution_date:
            return self._failure(validation_errors.TOKEN_EXPIRED)

        return AuthorizedTaskTokenValidationResult(
            is_success=True,
            user_id=task.user_id,
            expires_at=ensure_utc(task.expires_at),
        )

    def _failure(self, error: validation_errors.ErrorDefinition) -> AuthorizedTaskTokenValidationResult:
        return AuthorizedTaskTokenValidationResult(
            is_success=False,
            error=ValidationErrorDetail.from_exception(validation_errors.build(error, "token")),
        )

    async def _create_task(
        self,
        db: AsyncSession,
        user: User,
        task_type: str,
        expires_in: timedelta,
        now: datetime,
    ) -> AuthorizedTask:
        # 이전 작업은 새 작업으로 대체 — Earlier open tasks are superseded
        await authorized_task_repository.invalidate_open_tasks(db, user.id, task_type, now)
        return await authorized_task_repository.create(
            db,
            {
                "user_id": user.id,
                "task_type": task_type,
                "token": secrets.token_urlsafe(32),
                "expires_at": now + expires_in,
                "created_at": now,
            },
        )

    async def _use_task(
        self,
        db: AsyncSession,
        token: str,
        task_type: str,
        context: ExecutionContext,
    ) -> AuthorizedTask:
        result: AuthorizedTaskTokenValidationResult = await self.validate_token(
            db, ValidateAuthorizedTaskTokenQuery(token=token, task_type=task_type), context
        )
        result.throw_if_not_success()

        task: AuthorizedTask | None = await authorized_task_repository.get_by_token(db, token)
        if task is None:
            raise NotFoundError("Authorized task not found")
        task.completed_at = context.execution_date
        await authorized_task_repository.invalidate_open_tasks(
            db, task.user_id, task_type, context.execution_date, exclude_task_id=task.id
        )
        return task

    # === 계정 복구 (Account recovery) ===

    async def initiate_account_recovery(
        self,
        db: AsyncSession,
        command: InitiateUserAccountRecoveryViaEmailCommand,
        context: ExecutionContext,
    ) -> None:
        """계정 복구 이메일을 발송합니다.

        Create a recovery task and email its link. Unknown or inactive
        users and users without an email address are ignored silently.
        """
        user: User | None = await user_repository.get_by_username(db, command.user_area_code, command.username)
        if user is None or not user.is_active or not user.email:
            logger.info("Account recovery requested for unknown user %s/%s", command.user_area_code, command.username)
            return

        task: AuthorizedTask = await self._create_task(
            db,
            user,
            ACCOUNT_RECOVERY_TASK_TYPE,
            timedelta(hours=settings.ACCOUNT_RECOVERY_TOKEN_EXPIRE_HOURS),
            context.execution_date,
        )
        link: str = self._build_link("/account/recovery", task.token)
        await send_email(
            to=user.email,
            subject=f"{settings.APP_NAME} password reset",
            html=f'<p>Reset your password using the link below.</p><p><a href="{link}">{link}</a></p>',
            text=f"Reset your password using this link: {link}",
        )

    async def complete_account_recovery(
        self,
        db: AsyncSession,
        command: CompleteUserAccountRecoveryCommand,
        context: ExecutionContext,
    ) -> None:
        """계정 복구를 완료합니다.

        Set the new password, clear require_password_change, complete the
        task and invalidate any other open recovery task.

        Raises:
            ValidationError: 유효하지 않거나 만료된 토큰 (Invalid or expired token)
        """
        task: AuthorizedTask = await self._use_task(db, command.token, ACCOUNT_RECOVERY_TASK_TYPE, context)
        user: User = task.user
        user.password_hash = hash_password(command.new_password)
        user.require_password_change = False
        user.last_password_change_at = context.execution_date
        await refresh_token_repository.revoke_all_for_user(db, user.id)
        await db.flush()
        logger.info("Account recovery completed for user %s", user.id)

    # === 계정 인증 (Account verification) ===

    async def initiate_account_verification(
        self,
        db: AsyncSession,
        command: InitiateUserAccountVerificationViaEmailCommand,
        context: ExecutionContext,
    ) -> None:
        """계정 인증 이메일을 발송합니다.

        Raises:
            NotFoundError: 사용자 없음 (Unknown user)
            BadRequestError: 이메일 없음 또는 이미 인증됨 (No email, or already verified)
        """
        user: User | None = await user_repository.get_by_id(db, command.user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.is_account_verified:
            logger.debug("User %s is already verified", user.id)
            return
        if not user.email:
            raise validation_errors.build(validation_errors.ACCOUNT_EMAIL_MISSING, "user_id")

        task: AuthorizedTask = await self._create_task(
            db,
            user,
            ACCOUNT_VERIFICATION_TASK_TYPE,
            timedelta(hours=settings.ACCOUNT_VERIFICATION_TOKEN_EXPIRE_HOURS),
            context.execution_date,
        )
        link: str = self._build_link("/account/verify", task.token)
        await send_email(
            to=user.email,
            subject=f"{settings.APP_NAME} account verification",
            html=f'<p>Verify your account using the link below.</p><p><a href="{link}">{link}</a></p>',
            text=f"Verify your account using this link: {link}",
        )

    async def complete_account_verification(
        self,
        db: AsyncSession,
        command: CompleteUserAccountVerificationCommand,
        context: ExecutionContext,
    ) -> None:
        """계정 인증을 완료합니다 (Mark the account verified)."""
        task: AuthorizedTask = await self._use_task(db, command.token, ACCOUNT_VERIFICATION_TASK_TYPE, context)
        task.user.is_account_verified = True
        await db.flush()
        logger.info("Account verified for user %s", task.user_id)

    def _build_link(self, path: str, token: str) -> str:
        return f"{settings.SITE_BASE_URL.rstrip('/')}{path}?{urlencode({'token': token})}"


# 싱글턴 인스턴스 — Singleton instance
authorized_task_service: AuthorizedTaskService = AuthorizedTaskService()
