"""관리자 페이지 라우터 — 페이지 CRUD, 초안, 게시 워크플로.

Admin Page Router — page search and CRUD, draft version management,
publishing and previews of any version.
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
from app.schemas.page import (
    AddPageCommand,
    AddPageDraftVersionCommand,
    AddPageDraftVersionRequest,
    DeletePageCommand,
    DeletePageDraftVersionCommand,
    GetPageRenderSummaryByIdQuery,
    GetPageVersionSummariesByPageIdQuery,
    PageRenderSummary,
    PageSummary,
    PageVersionContent,
    PageVersionSummary,
    PublishPageCommand,
    PublishPageRequest,
    PublishStatusQuery,
    SearchPageSummariesQuery,
    UnpublishPageCommand,
    UpdatePageCommand,
    UpdatePageDraftVersionCommand,
    UpdatePageRequest,
)
from app.utils.exceptions import NotFoundError
from app.utils.pagination import PagedResult

router: APIRouter = APIRouter()


@router.get("", response_model=PagedResult[PageSummary])
async def search_pages(
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
    page_directory_id: Annotated[UUID | None, Query(description="디렉터리 필터")] = None,
    tag: Annotated[str | None, Query(description="태그 필터")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PagedResult[PageSummary]:
    """페이지 목록을 검색합니다 (Newest first)."""
    return await mediator.execute(
        db,
        SearchPageSummariesQuery(page_directory_id=page_directory_id, tag=tag, page=page, per_page=per_page),
        context,
    )


@router.post("", response_model=IdResponse, status_code=201)
async def add_page(
    data: AddPageCommand,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> IdResponse:
    """새 페이지를 생성합니다.

    Create a page with its first version, as a draft or published.
    """
    page_id: UUID = await mediator.execute(db, data, context)
    await db.commit()
    return IdResponse(id=str(page_id))


@router.get("/{page_id}", response_model=PageRenderSummary)
async def get_page(
    page_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
    publish_status: Annotated[PublishStatusQuery, Query()] = PublishStatusQuery.LATEST,
    version_id: Annotated[UUID | None, Query()] = None,
) -> PageRenderSummary:
    """페이지 미리보기 — 기본값은 최신 버전.

    Preview a page; defaults to the latest version.
    """
    result: PageRenderSummary | None = await mediator.execute(
        db,
        GetPageRenderSummaryByIdQuery(page_id=page_id, publish_status=publish_status, page_version_id=version_id),
        context,
    )
    if result is None:
        raise NotFoundError("Page not found")
    return result


@router.put("/{page_id}", status_code=204)
async def update_page(
    page_id: UUID,
    data: UpdatePageRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    await mediator.execute(db, UpdatePageCommand(page_id=page_id, tags=data.tags), context)
    await db.commit()


@router.delete("/{page_id}", status_code=204)
async def delete_page(
    page_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    await mediator.execute(db, DeletePageCommand(page_id=page_id), context)
    await db.commit()


@router.get("/{page_id}/versions", response_model=list[PageVersionSummary])
async def list_page_versions(
    page_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> list[PageVersionSummary]:
    """버전 목록, 최신 버전부터 (Newest first)."""
    return await mediator.execute(db, GetPageVersionSummariesByPageIdQuery(page_id=page_id), context)


@router.post("/{page_id}/draft", response_model=IdResponse, status_code=201)
async def add_draft_version(
    page_id: UUID,
    data: AddPageDraftVersionRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> IdResponse:
    """초안 버전을 생성합니다 (Copies the given or the latest version)."""
    version_id: UUID = await mediator.execute(
        db,
        AddPageDraftVersionCommand(page_id=page_id, copy_from_page_version_id=data.copy_from_page_version_id),
        context,
    )
    await db.commit()
    return IdResponse(id=str(version_id))


@router.put("/{page_id}/draft", status_code=204)
async def update_draft_version(
    page_id: UUID,
    data: PageVersionContent,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    """초안 버전을 수정합니다 (초안이 없으면 생성)."""
    await mediator.execute(db, UpdatePageDraftVersionCommand(page_id=page_id, **data.model_dump()), context)
    await db.commit()


@router.delete("/{page_id}/draft", status_code=204)
async def delete_draft_version(
    page_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    await mediator.execute(db, DeletePageDraftVersionCommand(page_id=page_id), context)
    await db.commit()


@router.post("/{page_id}/publish", status_code=204)
async def publish_page(
    page_id: UUID,
    data: PublishPageRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    """페이지를 게시합니다 (Publishes the draft when there is one)."""
    await mediator.execute(db, PublishPageCommand(page_id=page_id, publish_date=data.publish_date), context)
    await db.commit()


@router.post("/{page_id}/unpublish", status_code=204)
async def unpublish_page(
    page_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
) -> None:
    await mediator.execute(db, UnpublishPageCommand(page_id=page_id), context)
    await db.commit()
