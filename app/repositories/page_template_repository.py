"""페이지 템플릿 레포지토리.

Page template repository — Extends BaseRepository with name lookups and
archived filtering.
"""

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.page_template import PageTemplate
from app.repositories.base import BaseRepository


class PageTemplateRepository(BaseRepository[PageTemplate]):
    """페이지 템플릿 테이블 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the page_templates table.
    """

    def __init__(self) -> None:
        super().__init__(PageTemplate)

    async def get_by_name(
        self,
        db: AsyncSession,
        name: str,
    ) -> PageTemplate | None:
        """이름으로 템플릿을 조회합니다 (Find a template by its unique name)."""
        result = await db.execute(select(PageTemplate).where(PageTemplate.name == name))
        return result.scalar_one_or_none()

    async def get_list(
        self,
        db: AsyncSession,
        include_archived: bool = True,
    ) -> list[PageTemplate]:
        """템플릿 목록을 이름 순으로 조회합니다.

        Retrieve templates ordered by name.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            include_archived: 보관된 템플릿 포함 여부 (Whether to include archived templates)

        Returns:
            list[PageTemplate]: 템플릿 목록 (List of templates)
        """
        query: Select = select(PageTemplate).order_by(PageTemplate.name)
        if not include_archived:
            query = query.where(PageTemplate.is_archived.is_(False))
        result = await db.execute(query)
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instance
page_template_repository: PageTemplateRepository = PageTemplateRepository()
