"""관리자 역할 라우터 — 역할 및 권한 엔드포인트.

Admin Role Router — Endpoints for listing and adding roles and listing
the permission codes that can be granted.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_execution_context
from app.cqs.base import ExecutionContext
from app.cqs.mediator import mediator
from app.database import get_db
from app.schemas.common import IdResponse
from app.schemas.user import (
    AddRoleCommand,
    GetAllPermissionsQuery,
    GetAllRolesQuery,
    PermissionResponse,
    RoleResponse,
)

router: APIRouter = APIRouter()


@router.get("/roles", response_model=list[RoleResponse])
async def list_roles(
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
    user_area_code: Annotated[str | None, Query(description="사용자 영역 필터")] = None,
) -> list[RoleResponse]:
    """역할 목록을 조회합니다.

    List roles, optionally limited to one user area.
    """
    return await mediator.execute(db, GetAllRolesQuery(user_area_code=user_area_code), context)


@router.post("/roles", response_model=IdResponse, status_code=201)
async def add_role(
    data: AddRoleCommand,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> IdResponse:
    """새 역할을 생성합니다.

    Create a new role with the given permission codes.
    """
    role_id: UUID = await mediator.execute(db, data, context)
    await db.commit()
    return IdResponse(id=str(role_id))


@router.get("/permissions", response_model=list[PermissionResponse])
async def list_permissions(
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> list[PermissionResponse]:
    """부여 가능한 권한 목록 (Permission codes that can be granted)."""
    return await mediator.execute(db, GetAllPermissionsQuery(), context)
