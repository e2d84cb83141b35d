"""관리자 사용자 라우터 — 사용자 생성, 조회, 검색, 계정 인증 메일.

Admin User Router — Endpoints for adding, reading and searching users in
any user area, and for sending the account verification email.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_execution_context
from app.cqs.base import ExecutionContext
from app.cqs.mediator import mediator
from app.database import get_db
from app.schemas.auth import InitiateUserAccountVerificationViaEmailCommand
from app.schemas.common import IdResponse
from app.schemas.user import AddUserCommand, GetUserByIdQuery, SearchUsersQuery, UserResponse
from app.utils.exceptions import NotFoundError
from app.utils.pagination import PagedResult

router: APIRouter = APIRouter()


@router.get("", response_model=PagedResult[UserResponse])
async def search_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
    user_area_code: Annotated[str | None, Query(description="사용자 영역 필터")] = None,
    role_id: Annotated[UUID | None, Query(description="역할 ID 필터")] = None,
    keyword: Annotated[str | None, Query(description="사용자명/이메일/이름 검색어")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PagedResult[UserResponse]:
    """사용자 목록을 필터 조건으로 검색합니다.

    Search users with optional filters (user area, role, keyword).
    """
    return await mediator.execute(
        db,
        SearchUsersQuery(
            user_area_code=user_area_code,
            role_id=role_id,
            keyword=keyword,
            page=page,
            per_page=per_page,
        ),
        context,
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> UserResponse:
    """사용자 상세 정보를 조회합니다.

    Retrieve user detail with role information.
    """
    result: UserResponse | None = await mediator.execute(db, GetUserByIdQuery(user_id=user_id), context)
    if result is None:
        raise NotFoundError("User not found")
    return result


@router.post("", response_model=IdResponse, status_code=201)
async def add_user(
    data: AddUserCommand,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> IdResponse:
    """새 사용자를 생성합니다.

    Create a new user in the given user area.
    """
    user_id: UUID = await mediator.execute(db, data, context)
    await db.commit()
    return IdResponse(id=str(user_id))


@router.post("/{user_id}/verification", status_code=204)
async def send_verification_email(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    """계정 인증 메일을 발송합니다 (Send the account verification email)."""
    await mediator.execute(db, InitiateUserAccountVerificationViaEmailCommand(user_id=user_id), context)
    await db.commit()
