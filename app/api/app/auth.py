"""사이트 회원 인증 라우터 — 회원 로그인, 비밀번호 변경, 계정 복구 및 인증.

Site Member Auth Router — Sign-in to the member (MBR) user area, password
change, account recovery by email and account verification.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_execution_context
from app.cqs.base import ExecutionContext
from app.cqs.mediator import mediator
from app.database import get_db
from app.models.authentication import ACCOUNT_RECOVERY_TASK_TYPE
from app.models.user import User
from app.schemas.auth import (
    AccountRecoveryCompleteRequest,
    AccountRecoveryRequest,
    AuthorizedTaskTokenRequest,
    AuthorizedTaskTokenValidationResult,
    CompleteUserAccountRecoveryCommand,
    CompleteUserAccountVerificationCommand,
    InitiateUserAccountRecoveryViaEmailCommand,
    InitiateUserAccountVerificationViaEmailCommand,
    PasswordChangeRequest,
    SignInRequest,
    SignInUserWithCredentialsCommand,
    TokenResponse,
    UpdateUserPasswordByCredentialsCommand,
    ValidateAuthorizedTaskTokenQuery,
)
from app.schemas.common import ValidationResult
from app.user_areas import MEMBER_USER_AREA_CODE

router: APIRouter = APIRouter()


@router.post("/sign-in", response_model=TokenResponse)
async def member_sign_in(
    data: SignInRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> TokenResponse:
    """회원 로그인 — 회원 영역 전용.

    Member sign-in endpoint. Unverified members are rejected while the
    member area requires verification.
    """
    result: TokenResponse = await mediator.execute(
        db,
        SignInUserWithCredentialsCommand(
            user_area_code=MEMBER_USER_AREA_CODE,
            username=data.username,
            password=data.password,
            remember_user=data.remember_user,
        ),
        context,
    )
    await db.commit()
    return result


@router.put("/password", status_code=204)
async def member_change_password(
    data: PasswordChangeRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    await mediator.execute(
        db,
        UpdateUserPasswordByCredentialsCommand(
            user_area_code=MEMBER_USER_AREA_CODE,
            username=data.username,
            old_password=data.old_password,
            new_password=data.new_password,
        ),
        context,
    )
    await db.commit()


@router.post("/account-recovery", status_code=204)
async def start_account_recovery(
    data: AccountRecoveryRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    """계정 복구 메일을 요청합니다.

    Request an account recovery email. Always answers 204 so the endpoint
    does not reveal which usernames exist.
    """
    await mediator.execute(
        db,
        InitiateUserAccountRecoveryViaEmailCommand(user_area_code=MEMBER_USER_AREA_CODE, username=data.username),
        context,
    )
    await db.commit()


@router.post("/account-recovery/validate", response_model=ValidationResult)
async def validate_account_recovery(
    data: AuthorizedTaskTokenRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> ValidationResult:
    """복구 토큰이 아직 유효한지 확인합니다 (Check a recovery token before showing the form)."""
    result: AuthorizedTaskTokenValidationResult = await mediator.execute(
        db,
        ValidateAuthorizedTaskTokenQuery(token=data.token, task_type=ACCOUNT_RECOVERY_TASK_TYPE),
        context,
    )
    return ValidationResult(is_success=result.is_success, error=result.error)


@router.post("/account-recovery/complete", status_code=204)
async def complete_account_recovery(
    data: AccountRecoveryCompleteRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    """복구 토큰으로 새 비밀번호를 설정합니다."""
    await mediator.execute(
        db,
        CompleteUserAccountRecoveryCommand(token=data.token, new_password=data.new_password),
        context,
    )
    await db.commit()


@router.post("/verification", status_code=204)
async def resend_verification(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> None:
    """본인 계정 인증 메일을 다시 요청합니다.

    Send the verification email for the signed-in member's own account.
    """
    await mediator.execute(
        db,
        InitiateUserAccountVerificationViaEmailCommand(user_id=current_user.id),
        ExecutionContext.elevated(),
    )
    await db.commit()


@router.post("/verification/complete", status_code=204)
async def complete_verification(
    data: AuthorizedTaskTokenRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    await mediator.execute(db, CompleteUserAccountVerificationCommand(token=data.token), context)
    await db.commit()
