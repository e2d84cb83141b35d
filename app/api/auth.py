"""공통 인증 라우터 — 토큰 갱신, 로그아웃, 프로필 조회.

Common Auth Router — Token refresh, logout, and profile endpoints.
Shared by both admin and site clients.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_execution_context
from app.cqs.base import ExecutionContext
from app.cqs.mediator import mediator
from app.database import get_db
from app.models.user import User
from app.schemas.auth import (
    GetCurrentUserQuery,
    RefreshRequest,
    RefreshTokensCommand,
    SignOutCommand,
    TokenResponse,
    UserMeResponse,
)
from app.utils.exceptions import UnauthorizedError

router: APIRouter = APIRouter()


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    data: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> TokenResponse:
    """토큰 갱신 — 리프레시 토큰으로 새 토큰 쌍 발급.

    Refresh token endpoint. Issues a new token pair using a refresh token.
    """
    result: TokenResponse = await mediator.execute(
        db, RefreshTokensCommand(refresh_token=data.refresh_token), context
    )
    await db.commit()
    return result


@router.post("/logout", status_code=204)
async def logout(
    data: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    """로그아웃 — 리프레시 토큰 폐기.

    Logout endpoint. Revokes the given refresh token.
    """
    await mediator.execute(db, SignOutCommand(refresh_token=data.refresh_token), context)
    await db.commit()


@router.get("/me", response_model=UserMeResponse)
async def get_me(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> UserMeResponse:
    """현재 사용자 프로필 조회.

    Get the profile of the currently authenticated user.
    """
    result: UserMeResponse | None = await mediator.execute(db, GetCurrentUserQuery(), context)
    if result is None:
        raise UnauthorizedError()
    return result
