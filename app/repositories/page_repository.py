"""페이지 레포지토리 — 페이지 및 페이지 버전 쿼리.

Page Repository — Queries for pages, their versions and tag search.
Versions are always read with a direct query ordered by version number
rather than through the page's collection, so results reflect the latest
flushed state of the session.
"""

from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.page import Page, PageVersion, Tag, WorkFlowStatus
from app.repositories.base import BaseRepository


class PageRepository(BaseRepository[Page]):
    """pages / page_versions 테이블 쿼리를 담당하는 레포지토리.

    Repository handling queries for pages and page versions.
    """

    def __init__(self) -> None:
        super().__init__(Page)

    async def get_active(
        self,
        db: AsyncSession,
        page_id: UUID,
    ) -> Page | None:
        """삭제되지 않은 페이지를 조회합니다 (Retrieve a page that is not soft-deleted)."""
        result = await db.execute(
            select(Page).where(Page.id == page_id, Page.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def get_pages_by_ids(
        self,
        db: AsyncSession,
        page_ids: list[UUID],
    ) -> list[Page]:
        """ID 목록으로 페이지 조회 (삭제된 페이지 포함, including soft-deleted)."""
        if not page_ids:
            return []
        result = await db.execute(select(Page).where(Page.id.in_(page_ids)))
        return list(result.scalars().all())

    async def get_by_directory_and_path(
        self,
        db: AsyncSession,
        page_directory_id: UUID,
        url_path: str,
    ) -> Page | None:
        """디렉터리와 URL 경로로 삭제되지 않은 페이지를 조회합니다."""
        result = await db.execute(
            select(Page).where(
                Page.page_directory_id == page_directory_id,
                Page.url_path == url_path,
                Page.deleted_at.is_(None),
            )
        )
        return result.scalars().first()

    async def url_path_exists(
        self,
        db: AsyncSession,
        page_directory_id: UUID,
        url_path: str,
        exclude_page_id: UUID | None = None,
    ) -> bool:
        """디렉터리 내 URL 경로 사용 여부 (Whether a live page already uses the path)."""
        query = select(func.count()).select_from(Page).where(
            Page.page_directory_id == page_directory_id,
            Page.url_path == url_path,
            Page.deleted_at.is_(None),
        )
        if exclude_page_id is not None:
            query = query.where(Page.id != exclude_page_id)
        return ((await db.execute(query)).scalar() or 0) > 0

    async def get_versions(
        self,
        db: AsyncSession,
        page_id: UUID,
    ) -> list[PageVersion]:
        """페이지의 모든 버전을 버전 번호 순으로 조회합니다.

        Retrieve every version of a page ordered by version number, with
        the template loaded so archived templates can be filtered.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            page_id: 페이지 ID (Page UUID)

        Returns:
            list[PageVersion]: 버전 목록, 오래된 것부터 (Oldest first)
        """
        result = await db.execute(
            select(PageVersion)
            .options(selectinload(PageVersion.page_template))
            .where(PageVersion.page_id == page_id)
            .order_by(PageVersion.version_number)
        )
        return list(result.scalars().all())

    async def get_versions_for_pages(
        self,
        db: AsyncSession,
        page_ids: list[UUID],
    ) -> dict[UUID, list[PageVersion]]:
        """여러 페이지의 버전을 한 번에 조회해 페이지 ID별로 묶습니다."""
        grouped: dict[UUID, list[PageVersion]] = {page_id: [] for page_id in page_ids}
        if not page_ids:
            return grouped
        result = await db.execute(
            select(PageVersion)
            .options(selectinload(PageVersion.page_template))
            .where(PageVersion.page_id.in_(page_ids))
            .order_by(PageVersion.page_id, PageVersion.version_number)
        )
        for version in result.scalars().all():
            grouped[version.page_id].append(version)
        return grouped

    async def get_version(
        self,
        db: AsyncSession,
        page_version_id: UUID,
    ) -> PageVersion | None:
        result = await db.execute(
            select(PageVersion)
            .options(selectinload(PageVersion.page_template))
            .where(PageVersion.id == page_version_id)
        )
        return result.scalar_one_or_none()

    async def get_draft(
        self,
        db: AsyncSession,
        page_id: UUID,
    ) -> PageVersion | None:
        """페이지의 초안 버전 (The page's draft version, if any)."""
        result = await db.execute(
            select(PageVersion)
            .where(
                PageVersion.page_id == page_id,
                PageVersion.work_flow_status == WorkFlowStatus.DRAFT.value,
            )
            .order_by(PageVersion.version_number.desc())
        )
        return result.scalars().first()

    async def get_max_version_number(
        self,
        db: AsyncSession,
        page_id: UUID,
    ) -> int:
        result = await db.execute(
            select(func.max(PageVersion.version_number)).where(PageVersion.page_id == page_id)
        )
        return result.scalar() or 0

    async def count_versions(
        self,
        db: AsyncSession,
        page_id: UUID,
    ) -> int:
        result = await db.execute(
            select(func.count()).select_from(PageVersion).where(PageVersion.page_id == page_id)
        )
        return result.scalar() or 0

    def build_search_query(
        self,
        page_directory_id: UUID | None = None,
        tag: str | None = None,
    ) -> Select:
        """페이지 검색 쿼리를 생성합니다.

        Build the base query for searching live pages.

        Args:
            page_directory_id: 디렉터리 필터 (Directory filter)
            tag: 태그 텍스트 필터 (Tag text filter)

        Returns:
            Select: 생성일 역순 정렬된 쿼리 (Query ordered newest first)
        """
        query: Select = select(Page).where(Page.deleted_at.is_(None))
        if page_directory_id is not None:
            query = query.where(Page.page_directory_id == page_directory_id)
        if tag:
            query = query.where(Page.tags.any(Tag.tag_text == tag.strip().lower()))
        return query.order_by(Page.created_at.desc())


# 싱글턴 인스턴스 — Singleton instance
page_repository: PageRepository = PageRepository()
