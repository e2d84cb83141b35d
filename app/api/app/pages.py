"""사이트 페이지 라우터 — 공개 페이지 렌더 요약.

Site Page Router — Render summaries for the public site, by id or by
full path. Directory access rules are enforced on every page returned;
a path with no page is answered by a matching rewrite rule (301) or 404.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_execution_context
from app.cqs.base import ExecutionContext
from app.cqs.mediator import mediator
from app.database import get_db
from app.schemas.page import (
    GetPageRenderSummaryByIdQuery,
    GetPageRenderSummaryByPathQuery,
    PageRenderSummary,
    PublishStatusQuery,
)
from app.schemas.page_directory import EnforcePageDirectoryAccessRulesQuery
from app.schemas.rewrite_rule import GetRewriteRuleByPathQuery, RewriteRuleResponse
from app.utils.exceptions import NotFoundError

router: APIRouter = APIRouter()


async def _enforce_access_rules(
    db: AsyncSession,
    summary: PageRenderSummary,
    context: ExecutionContext,
) -> PageRenderSummary:
    await mediator.execute(
        db,
        EnforcePageDirectoryAccessRulesQuery(page_directory_id=UUID(summary.page_route.page_directory_id)),
        context,
    )
    return summary


@router.get("/by-path", response_model=PageRenderSummary)
async def get_page_by_path(
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
    path: Annotated[str, Query(description="전체 경로 (e.g. /blog/hello-world)")],
    publish_status: Annotated[PublishStatusQuery, Query()] = PublishStatusQuery.PUBLISHED,
    version_id: Annotated[UUID | None, Query()] = None,
) -> PageRenderSummary | RedirectResponse:
    """전체 경로로 페이지를 조회합니다.

    Resolve a page by its full path. When nothing resolves and a rewrite
    rule matches the path, redirect permanently to its target.
    """
    summary: PageRenderSummary | None = await mediator.execute(
        db,
        GetPageRenderSummaryByPathQuery(path=path, publish_status=publish_status, page_version_id=version_id),
        context,
    )
    if summary is None:
        rule: RewriteRuleResponse | None = await mediator.execute(
            db, GetRewriteRuleByPathQuery(path=path), context
        )
        if rule is not None:
            return RedirectResponse(rule.write_to, status_code=301)
        raise NotFoundError("Page not found")
    return await _enforce_access_rules(db, summary, context)


@router.get("/{page_id}", response_model=PageRenderSummary)
async def get_page(
    page_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    context: Annotated[ExecutionContext, Depends(get_execution_context)],
    publish_status: Annotated[PublishStatusQuery, Query()] = PublishStatusQuery.PUBLISHED,
    version_id: Annotated[UUID | None, Query()] = None,
) -> PageRenderSummary:
    """ID로 페이지를 조회합니다.

    Anything but the published content is a preview and needs the
    "pages:read" permission.
    """
    summary: PageRenderSummary | None = await mediator.execute(
        db,
        GetPageRenderSummaryByIdQuery(page_id=page_id, publish_status=publish_status, page_version_id=version_id),
        context,
    )
    if summary is None:
        raise NotFoundError("Page not found")
    return await _enforce_access_rules(db, summary, context)
