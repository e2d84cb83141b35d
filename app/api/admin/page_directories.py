"""관리자 페이지 디렉터리 라우터 — 디렉터리 트리 및 접근 규칙.

Admin Page Directory Router — directory CRUD and the access rule set of
each directory.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_execution_context
from app.cqs.base import ExecutionContext
from app.cqs.mediator import mediator
from app.database import get_db
from app.schemas.common import IdResponse
from app.schemas.page_directory import (
    AccessRuleSetRequest,
    AddPageDirectoryCommand,
    DeletePageDirectoryCommand,
    GetAllPageDirectoriesQuery,
    GetPageDirectoryByIdQuery,
    GetUpdatePageDirectoryAccessRuleSetCommandByIdQuery,
    PageDirectoryResponse,
    UpdatePageDirectoryAccessRuleSetCommand,
)
from app.utils.exceptions import NotFoundError

router: APIRouter = APIRouter()


@router.get("", response_model=list[PageDirectoryResponse])
async def list_page_directories(
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> list[PageDirectoryResponse]:
    """디렉터리 전체 목록 (Every directory, ordered by full path)."""
    return await mediator.execute(db, GetAllPageDirectoriesQuery(), context)


@router.get("/{page_directory_id}", response_model=PageDirectoryResponse)
async def get_page_directory(
    page_directory_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> PageDirectoryResponse:
    result: PageDirectoryResponse | None = await mediator.execute(
        db, GetPageDirectoryByIdQuery(page_directory_id=page_directory_id), context
    )
    if result is None:
        raise NotFoundError("Page directory not found")
    return result


@router.post("", response_model=IdResponse, status_code=201)
async def add_page_directory(
    data: AddPageDirectoryCommand,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> IdResponse:
    """디렉터리를 생성합니다 (Parent defaults to the root directory)."""
    directory_id: UUID = await mediator.execute(db, data, context)
    await db.commit()
    return IdResponse(id=str(directory_id))


@router.delete("/{page_directory_id}", status_code=204)
async def delete_page_directory(
    page_directory_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    await mediator.execute(db, DeletePageDirectoryCommand(page_directory_id=page_directory_id), context)
    await db.commit()


@router.get("/{page_directory_id}/access-rules", response_model=UpdatePageDirectoryAccessRuleSetCommand)
async def get_access_rule_set(
    page_directory_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> UpdatePageDirectoryAccessRuleSetCommand:
    """접근 규칙 집합을 수정용 커맨드 형태로 조회합니다.

    Return the access rule set as a pre-filled update command.
    """
    result: UpdatePageDirectoryAccessRuleSetCommand | None = await mediator.execute(
        db, GetUpdatePageDirectoryAccessRuleSetCommandByIdQuery(page_directory_id=page_directory_id), context
    )
    if result is None:
        raise NotFoundError("Page directory not found")
    return result


@router.put("/{page_directory_id}/access-rules", status_code=204)
async def update_access_rule_set(
    page_directory_id: UUID,
    data: AccessRuleSetRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    """접근 규칙 집합을 갱신합니다.

    Replace the access rule set: rules with an id are updated, rules
    without one are added and missing rules are deleted.
    """
    await mediator.execute(
        db,
        UpdatePageDirectoryAccessRuleSetCommand(page_directory_id=page_directory_id, **data.model_dump()),
        context,
    )
    await db.commit()
