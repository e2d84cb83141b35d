"""페이지 서비스 — 페이지 게시 워크플로 비즈니스 로직.

Page Service — adding pages, managing the draft version, publishing,
unpublishing and deleting pages, plus the admin page listings.

Workflow rules:
    - 페이지당 초안은 최대 1개 (At most one draft version per page)
    - 버전 번호는 페이지 내에서 1부터 증가 (Version numbers grow from 1 per page)
    - 게시된 버전은 게시 상태를 유지하고, 가장 높은 번호가 현재 게시본
      (Published versions keep their status; the highest one is current)
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.cqs.base import ExecutionContext
from app.models.page import Page, PageVersion, PublishStatus, Tag, WorkFlowStatus
from app.models.page_directory import PageDirectory
from app.models.page_template import PageTemplate
from app.repositories.page_directory_repository import (
    build_full_path,
    page_directory_repository,
    walk_chain,
)
from app.repositories.page_repository import page_repository
from app.repositories.page_template_repository import page_template_repository
from app.repositories.tag_repository import tag_repository
from app.schemas.page import (
    AddPageCommand,
    AddPageDraftVersionCommand,
    DeletePageCommand,
    DeletePageDraftVersionCommand,
    GetPageVersionSummariesByPageIdQuery,
    PageSummary,
    PageVersionContent,
    PageVersionSummary,
    PublishPageCommand,
    SearchPageSummariesQuery,
    UnpublishPageCommand,
    UpdatePageCommand,
    UpdatePageDraftVersionCommand,
)
from app.utils import validation_errors
from app.utils.exceptions import BadRequestError, NotFoundError
from app.utils.pagination import PagedResult, paginate

logger = logging.getLogger(__name__)


def join_page_path(directory_path: str, url_path: str) -> str:
    """디렉터리 전체 경로와 페이지 경로를 합칩니다.

    "/" + "about" -> "/about", "/blog" + "" -> "/blog".
    """
    if not url_path:
        return directory_path
    if directory_path == "/":
        return "/" + url_path
    return f"{directory_path}/{url_path}"


class PageService:
    """페이지 워크플로 비즈니스 로직 서비스."""

    async def _get_page_or_404(self, db: AsyncSession, page_id: UUID) -> Page:
        page: Page | None = await page_repository.get_active(db, page_id)
        if page is None:
            raise NotFoundError("Page not found")
        return page

    async def _get_usable_template(self, db: AsyncSession, page_template_id: UUID) -> PageTemplate:
        """선택 가능한 템플릿을 조회합니다.

        Raises:
            NotFoundError: 템플릿 없음 (Unknown template)
            ValidationError: 보관된 템플릿 (Archived template)
        """
        template: PageTemplate | None = await page_template_repository.get_by_id(db, page_template_id)
        if template is None:
            raise NotFoundError("Page template not found")
        if template.is_archived:
            raise validation_errors.build(validation_errors.PAGE_TEMPLATE_ARCHIVED, "page_template_id")
        return template

    def _apply_content(self, version: PageVersion, content: PageVersionContent) -> None:
        version.page_template_id = content.page_template_id
        version.title = content.title.strip()
        version.meta_description = content.meta_description
        version.open_graph_title = content.open_graph_title
        version.open_graph_description = content.open_graph_description
        version.open_graph_image_url = content.open_graph_image_url
        version.show_in_site_map = content.show_in_site_map

    async def add_page(
        self,
        db: AsyncSession,
        command: AddPageCommand,
        context: ExecutionContext,
    ) -> UUID:
        """새 페이지를 생성합니다.

        Create a page and its first version, either as a draft or
        published straight away.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            command: 페이지 추가 커맨드 (Add page command)
            context: 실행 컨텍스트 (Execution context)

        Returns:
            UUID: 생성된 페이지 ID (Created page id)

        Raises:
            NotFoundError: 디렉터리 또는 템플릿 없음 (Unknown directory or template)
            ValidationError: 경로 중복 또는 보관된 템플릿 (Path in use, archived template)
        """
        directory: PageDirectory | None = await page_directory_repository.get_by_id(db, command.page_directory_id)
        if directory is None:
            raise NotFoundError("Page directory not found")
        if await page_repository.url_path_exists(db, directory.id, command.url_path):
            raise validation_errors.build(validation_errors.PAGE_URL_PATH_IN_USE, "url_path")
        await self._get_usable_template(db, command.page_template_id)

        tags: list[Tag] = await tag_repository.get_or_create_many(db, command.tags)
        now: datetime = context.execution_date

        page = Page(
            page_directory_id=directory.id,
            url_path=command.url_path,
            publish_status=PublishStatus.UNPUBLISHED.value,
            created_by_user_id=context.user_id,
            tags=tags,
        )
        if command.publish:
            page.publish_status = PublishStatus.PUBLISHED.value
            page.publish_date = command.publish_date or now
            page.last_publish_date = now
        db.add(page)
        await db.flush()

        version = PageVersion(
            page_id=page.id,
            version_number=1,
            work_flow_status=(
                WorkFlowStatus.PUBLISHED.value if command.publish else WorkFlowStatus.DRAFT.value
            ),
            created_by_user_id=context.user_id,
        )
        self._apply_content(version, command)
        db.add(version)
        await db.flush()

        logger.info("Page %s added to directory %s (published=%s)", page.id, directory.id, command.publish)
        return page.id

    async def add_draft_version(
        self,
        db: AsyncSession,
        command: AddPageDraftVersionCommand,
        context: ExecutionContext,
    ) -> UUID:
        """초안 버전을 생성합니다.

        Create a draft by copying the given version, or the latest one.

        Raises:
            NotFoundError: 페이지 또는 원본 버전 없음 (Unknown page or source version)
            ValidationError: 이미 초안이 존재 (The page already has a draft)
        """
        page: Page = await self._get_page_or_404(db, command.page_id)
        if await page_repository.get_draft(db, page.id) is not None:
            raise validation_errors.build(validation_errors.PAGE_DRAFT_EXISTS)

        if command.copy_from_page_version_id is not None:
            source: PageVersion | None = await page_repository.get_version(db, command.copy_from_page_version_id)
            if source is None or source.page_id != page.id:
                raise NotFoundError("Page version not found")
        else:
            versions: list[PageVersion] = await page_repository.get_versions(db, page.id)
            if not versions:
                raise NotFoundError("Page version not found")
            source = versions[-1]

        draft = PageVersion(
            page_id=page.id,
            version_number=await page_repository.get_max_version_number(db, page.id) + 1,
            page_template_id=source.page_template_id,
            title=source.title,
            meta_description=source.meta_description,
            open_graph_title=source.open_graph_title,
            open_graph_description=source.open_graph_description,
            open_graph_image_url=source.open_graph_image_url,
            show_in_site_map=source.show_in_site_map,
            work_flow_status=WorkFlowStatus.DRAFT.value,
            created_by_user_id=context.user_id,
        )
        db.add(draft)
        await db.flush()
        logger.info("Draft version %s added to page %s", draft.version_number, page.id)
        return draft.id

    async def update_draft_version(
        self,
        db: AsyncSession,
        command: UpdatePageDraftVersionCommand,
        context: ExecutionContext,
    ) -> None:
        """초안 버전을 수정합니다 (초안이 없으면 최신 버전에서 생성)."""
        page: Page = await self._get_page_or_404(db, command.page_id)
        await self._get_usable_template(db, command.page_template_id)

        draft: PageVersion | None = await page_repository.get_draft(db, page.id)
        if draft is None:
            draft_id: UUID = await self.add_draft_version(
                db, AddPageDraftVersionCommand(page_id=page.id), context
            )
            draft = await page_repository.get_version(db, draft_id)

        self._apply_content(draft, command)
        await db.flush()

    async def publish(
        self,
        db: AsyncSession,
        command: PublishPageCommand,
        context: ExecutionContext,
    ) -> None:
        """페이지를 게시합니다.

        Publish the draft when there is one, otherwise re-publish an
        unpublished page with its existing published versions.

        Raises:
            NotFoundError: 페이지 없음 (Unknown page)
            BadRequestError: 초안 없이 이미 게시된 페이지 (Nothing new to publish)
            ValidationError: 초안의 템플릿이 보관됨 (Draft uses an archived template)
        """
        page: Page = await self._get_page_or_404(db, command.page_id)
        draft: PageVersion | None = await page_repository.get_draft(db, page.id)

        if draft is None and page.publish_status == PublishStatus.PUBLISHED.value:
            raise BadRequestError("The page is already published and has no draft to publish")
        if draft is not None:
            await self._get_usable_template(db, draft.page_template_id)
            draft.work_flow_status = WorkFlowStatus.PUBLISHED.value

        now: datetime = context.execution_date
        page.publish_status = PublishStatus.PUBLISHED.value
        if command.publish_date is not None:
            page.publish_date = command.publish_date
        elif page.publish_date is None:
            page.publish_date = now
        page.last_publish_date = now
        await db.flush()
        logger.info("Page %s published", page.id)

    async def unpublish(
        self,
        db: AsyncSession,
        command: UnpublishPageCommand,
        context: ExecutionContext,
    ) -> None:
        page: Page = await self._get_page_or_404(db, command.page_id)
        if page.publish_status != PublishStatus.PUBLISHED.value:
            raise BadRequestError("The page is not published")
        page.publish_status = PublishStatus.UNPUBLISHED.value
        await db.flush()
        logger.info("Page %s unpublished", page.id)

    async def delete_draft_version(
        self,
        db: AsyncSession,
        command: DeletePageDraftVersionCommand,
        context: ExecutionContext,
    ) -> None:
        """초안 버전을 삭제합니다.

        Raises:
            NotFoundError: 페이지 또는 초안 없음 (Unknown page or no draft)
            BadRequestError: 초안이 유일한 버전 (The draft is the only version)
        """
        page: Page = await self._get_page_or_404(db, command.page_id)
        draft: PageVersion | None = await page_repository.get_draft(db, page.id)
        if draft is None:
            raise NotFoundError("The page has no draft version")
        if await page_repository.count_versions(db, page.id) <= 1:
            raise BadRequestError("The only version of a page cannot be deleted; delete the page instead")

        await db.delete(draft)
        await db.flush()
        logger.info("Draft version of page %s deleted", page.id)

    async def update_page(
        self,
        db: AsyncSession,
        command: UpdatePageCommand,
        context: ExecutionContext,
    ) -> None:
        page: Page = await self._get_page_or_404(db, command.page_id)
        page.tags = await tag_repository.get_or_create_many(db, command.tags)
        await db.flush()

    async def delete_page(
        self,
        db: AsyncSession,
        command: DeletePageCommand,
        context: ExecutionContext,
    ) -> None:
        """페이지를 소프트 삭제합니다 (The url path becomes free again)."""
        page: Page = await self._get_page_or_404(db, command.page_id)
        page.deleted_at = context.execution_date
        await db.flush()
        logger.info("Page %s deleted", page.id)

    async def search(
        self,
        db: AsyncSession,
        query: SearchPageSummariesQuery,
        context: ExecutionContext,
    ) -> PagedResult[PageSummary]:
        """관리자 페이지 목록을 검색합니다 (Newest pages first)."""
        items, total = await paginate(
            db,
            page_repository.build_search_query(query.page_directory_id, query.tag),
            query.page,
            query.per_page,
        )
        pages: list[Page] = list(items)
        versions_by_page: dict[UUID, list[PageVersion]] = await page_repository.get_versions_for_pages(
            db, [p.id for p in pages]
        )
        directories: dict[UUID, PageDirectory] = {
            d.id: d for d in await page_directory_repository.get_list(db)
        }

        summaries: list[PageSummary] = []
        for page in pages:
            versions: list[PageVersion] = versions_by_page.get(page.id, [])
            directory_path: str = build_full_path(walk_chain(directories, page.page_directory_id))
            summaries.append(
                PageSummary(
                    id=str(page.id),
                    page_directory_id=str(page.page_directory_id),
                    url_path=page.url_path,
                    full_path=join_page_path(directory_path, page.url_path),
                    title=versions[-1].title if versions else "",
                    publish_status=PublishStatus(page.publish_status),
                    publish_date=page.publish_date,
                    has_draft=any(v.work_flow_status == WorkFlowStatus.DRAFT.value for v in versions),
                    tags=[t.tag_text for t in page.tags],
                    created_at=page.created_at,
                )
            )
        return PagedResult[PageSummary].build(summaries, total, query.page, query.per_page)

    async def get_version_summaries(
        self,
        db: AsyncSession,
        query: GetPageVersionSummariesByPageIdQuery,
        context: ExecutionContext,
    ) -> list[PageVersionSummary]:
        await self._get_page_or_404(db, query.page_id)
        versions: list[PageVersion] = await page_repository.get_versions(db, query.page_id)
        return [
            PageVersionSummary(
                id=str(v.id),
                version_number=v.version_number,
                title=v.title,
                work_flow_status=WorkFlowStatus(v.work_flow_status),
                page_template_id=str(v.page_template_id),
                created_at=v.created_at,
            )
            for v in reversed(versions)
        ]


# 싱글턴 인스턴스 — Singleton instance
page_service: PageService = PageService()
