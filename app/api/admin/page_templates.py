"""관리자 페이지 템플릿 라우터.

Admin Page Template Router — add, list, archive and unarchive templates.
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
from app.schemas.page_template import (
    AddPageTemplateCommand,
    ArchivePageTemplateCommand,
    GetAllPageTemplatesQuery,
    PageTemplateResponse,
    UnarchivePageTemplateCommand,
)

router: APIRouter = APIRouter()


@router.get("", response_model=list[PageTemplateResponse])
async def list_page_templates(
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
    include_archived: Annotated[bool, Query(description="보관된 템플릿 포함 여부")] = True,
) -> list[PageTemplateResponse]:
    """템플릿 목록을 조회합니다."""
    return await mediator.execute(db, GetAllPageTemplatesQuery(include_archived=include_archived), context)


@router.post("", response_model=IdResponse, status_code=201)
async def add_page_template(
    data: AddPageTemplateCommand,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> IdResponse:
    """새 템플릿을 등록합니다."""
    template_id: UUID = await mediator.execute(db, data, context)
    await db.commit()
    return IdResponse(id=str(template_id))


@router.post("/{page_template_id}/archive", status_code=204)
async def archive_page_template(
    page_template_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    """템플릿을 보관합니다 (Pages using it stop rendering)."""
    await mediator.execute(db, ArchivePageTemplateCommand(page_template_id=page_template_id), context)
    await db.commit()


@router.post("/{page_template_id}/unarchive", status_code=204)
async def unarchive_page_template(
    page_template_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    await mediator.execute(db, UnarchivePageTemplateCommand(page_template_id=page_template_id), context)
    await db.commit()
