"""페이지 렌더 서비스 — 게시 상태 필터에 따른 버전 해석.

Page Render Service — resolves which version of a page to render for a
publish status filter and builds the render summary with its route.

Resolution by filter:
    PUBLISHED         페이지가 게시 상태이고 게시일이 지났을 때 최신 게시 버전
                      (Newest published version while the page is visibly published)
    DRAFT             초안 버전 (The draft)
    LATEST            가장 높은 버전 번호 (Highest version number)
    PREFER_PUBLISHED  게시 버전, 없으면 최신 (Published, falling back to latest)
    SPECIFIC_VERSION  지정한 버전 (The requested version; also implied by a version id)

Deleted pages and versions using an archived template resolve to nothing.
Anything other than the published content is a preview and requires the
"pages:read" permission.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.cqs.base import ExecutionContext
from app.cqs.mediator import mediator
from app.models.page import Page, PageVersion, PublishStatus, WorkFlowStatus
from app.models.page_directory import PageDirectory
from app.repositories.page_directory_repository import (
    build_full_path,
    page_directory_repository,
    walk_chain,
)
from app.repositories.page_repository import page_repository
from app.schemas.page import (
    GetPageRenderSummariesByIdRangeQuery,
    GetPageRenderSummaryByIdQuery,
    GetPageRenderSummaryByPathQuery,
    OpenGraphData,
    PageRenderSummary,
    PageRoute,
    PublishStatusQuery,
)
from app.services.page_service import join_page_path
from app.utils.timezone import ensure_utc

logger = logging.getLogger(__name__)

# 미리보기 권한 — Permission required to render anything but published content
PREVIEW_PERMISSION: str = "pages:read"


def is_visibly_published(page: Page, now: datetime) -> bool:
    """페이지가 게시 상태이고 게시일이 지났는지 확인합니다."""
    if page.publish_status != PublishStatus.PUBLISHED.value:
        return False
    publish_date: datetime | None = ensure_utc(page.publish_date)
    return publish_date is None or publish_date <= now


def resolve_version(
    page: Page,
    versions: list[PageVersion],
    publish_status: PublishStatusQuery,
    page_version_id: UUID | None,
    now: datetime,
) -> PageVersion | None:
    """게시 상태 필터로 렌더링할 버전을 고릅니다.

    Pick the version to render.

    Args:
        page: 페이지 (The page)
        versions: 버전 번호 순 버전 목록, 템플릿 로드됨 (Versions oldest first, templates loaded)
        publish_status: 게시 상태 필터 (Publish status filter)
        page_version_id: 지정 버전 ID, 주어지면 SPECIFIC_VERSION으로 취급
                         (Requested version; implies SPECIFIC_VERSION)
        now: 기준 일시 UTC (Reference time)

    Returns:
        PageVersion | None: 해석된 버전, 없으면 None (Resolved version or None)
    """
    if page.is_deleted:
        return None

    version: PageVersion | None = None
    if page_version_id is not None or publish_status == PublishStatusQuery.SPECIFIC_VERSION:
        version = next((v for v in versions if v.id == page_version_id), None)
    elif publish_status == PublishStatusQuery.DRAFT:
        version = next((v for v in versions if v.work_flow_status == WorkFlowStatus.DRAFT.value), None)
    elif publish_status == PublishStatusQuery.LATEST:
        version = versions[-1] if versions else None
    elif publish_status == PublishStatusQuery.PUBLISHED:
        version = _published_version(page, versions, now)
    elif publish_status == PublishStatusQuery.PREFER_PUBLISHED:
        version = _published_version(page, versions, now) or (versions[-1] if versions else None)

    if version is None or version.page_template.is_archived:
        return None
    return version


def _published_version(page: Page, versions: list[PageVersion], now: datetime) -> PageVersion | None:
    if not is_visibly_published(page, now):
        return None
    published: list[PageVersion] = [v for v in versions if v.work_flow_status == WorkFlowStatus.PUBLISHED.value]
    return published[-1] if published else None


def build_render_summary(page: Page, version: PageVersion, full_path: str) -> PageRenderSummary:
    return PageRenderSummary(
        page_id=str(page.id),
        page_version_id=str(version.id),
        version_number=version.version_number,
        title=version.title,
        meta_description=version.meta_description,
        open_graph=OpenGraphData(
            title=version.open_graph_title,
            description=version.open_graph_description,
            image_url=version.open_graph_image_url,
        ),
        show_in_site_map=version.show_in_site_map,
        work_flow_status=WorkFlowStatus(version.work_flow_status),
        page_template_id=str(version.page_template_id),
        template_file_path=version.page_template.file_path,
        created_at=version.created_at,
        publish_status=PublishStatus(page.publish_status),
        publish_date=page.publish_date,
        last_publish_date=page.last_publish_date,
        tags=[t.tag_text for t in page.tags],
        page_route=PageRoute(
            page_id=str(page.id),
            page_directory_id=str(page.page_directory_id),
            url_path=page.url_path,
            full_path=full_path,
        ),
    )


class PageRenderService:
    """페이지 렌더 요약 조회 서비스."""

    async def _check_preview(
        self,
        db: AsyncSession,
        publish_status: PublishStatusQuery,
        page_version_id: UUID | None,
        context: ExecutionContext,
    ) -> None:
        """게시본 외 조회는 미리보기 권한을 요구합니다.

        Raises:
            UnauthorizedError: 익명 호출자 (Anonymous caller)
            ForbiddenError: 권한 없음 (Caller lacks the preview permission)
        """
        if publish_status != PublishStatusQuery.PUBLISHED or page_version_id is not None:
            await mediator.check_permission(db, PREVIEW_PERMISSION, context)

    async def _summarize(
        self,
        db: AsyncSession,
        pages: list[Page],
        publish_status: PublishStatusQuery,
        page_version_id: UUID | None,
        now: datetime,
    ) -> dict[UUID, PageRenderSummary]:
        if not pages:
            return {}
        versions_by_page: dict[UUID, list[PageVersion]] = await page_repository.get_versions_for_pages(
            db, [p.id for p in pages]
        )
        directories: dict[UUID, PageDirectory] = {
            d.id: d for d in await page_directory_repository.get_list(db)
        }

        summaries: dict[UUID, PageRenderSummary] = {}
        for page in pages:
            version: PageVersion | None = resolve_version(
                page, versions_by_page.get(page.id, []), publish_status, page_version_id, now
            )
            if version is None:
                continue
            directory_path: str = build_full_path(walk_chain(directories, page.page_directory_id))
            summaries[page.id] = build_render_summary(
                page, version, join_page_path(directory_path, page.url_path)
            )
        return summaries

    async def get_by_id(
        self,
        db: AsyncSession,
        query: GetPageRenderSummaryByIdQuery,
        context: ExecutionContext,
    ) -> PageRenderSummary | None:
        """ID로 페이지 렌더 요약을 조회합니다.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            query: 렌더 요약 쿼리 (Render summary query)
            context: 실행 컨텍스트 (Execution context)

        Returns:
            PageRenderSummary | None: 해석되지 않으면 None (None when nothing resolves)
        """
        await self._check_preview(db, query.publish_status, query.page_version_id, context)
        pages: list[Page] = await page_repository.get_pages_by_ids(db, [query.page_id])
        summaries = await self._summarize(
            db, pages, query.publish_status, query.page_version_id, context.execution_date
        )
        return summaries.get(query.page_id)

    async def get_by_id_range(
        self,
        db: AsyncSession,
        query: GetPageRenderSummariesByIdRangeQuery,
        context: ExecutionContext,
    ) -> dict[UUID, PageRenderSummary]:
        """여러 페이지의 렌더 요약 (Pages that do not resolve are left out)."""
        await self._check_preview(db, query.publish_status, None, context)
        pages: list[Page] = await page_repository.get_pages_by_ids(db, list(dict.fromkeys(query.page_ids)))
        return await self._summarize(db, pages, query.publish_status, None, context.execution_date)

    async def get_by_path(
        self,
        db: AsyncSession,
        query: GetPageRenderSummaryByPathQuery,
        context: ExecutionContext,
    ) -> PageRenderSummary | None:
        """전체 경로로 페이지 렌더 요약을 조회합니다.

        The last path segment is first tried as a page inside the
        directory named by the preceding segments, then the whole path is
        tried as a directory holding an index page ("" url path).
        """
        await self._check_preview(db, query.publish_status, query.page_version_id, context)
        page: Page | None = await self._find_page_by_path(db, query.path)
        if page is None:
            return None
        summaries = await self._summarize(
            db, [page], query.publish_status, query.page_version_id, context.execution_date
        )
        return summaries.get(page.id)

    async def _find_page_by_path(self, db: AsyncSession, path: str) -> Page | None:
        segments: list[str] = [s for s in path.strip().lower().split("/") if s]
        root: PageDirectory | None = await page_directory_repository.get_root(db)
        if root is None:
            return None

        candidates: list[tuple[list[str], str]] = []
        if segments:
            candidates.append((segments[:-1], segments[-1]))
        candidates.append((segments, ""))

        for directory_segments, url_path in candidates:
            directory: PageDirectory | None = root
            for segment in directory_segments:
                directory = await page_directory_repository.get_by_parent_and_path(db, directory.id, segment)
                if directory is None:
                    break
            if directory is None:
                continue
            page: Page | None = await page_repository.get_by_directory_and_path(db, directory.id, url_path)
            if page is not None:
                return page
        return None


# 싱글턴 인스턴스 — Singleton instance
page_render_service: PageRenderService = PageRenderService()
