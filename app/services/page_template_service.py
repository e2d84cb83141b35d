"""페이지 템플릿 서비스.

Page Template Service — add, archive, unarchive and list templates.
Archiving never touches pages; render queries exclude versions whose
template is archived.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.cqs.base import ExecutionContext
from app.models.page_template import PageTemplate
from app.repositories.page_template_repository import page_template_repository
from app.schemas.page_template import (
    AddPageTemplateCommand,
    ArchivePageTemplateCommand,
    GetAllPageTemplatesQuery,
    PageTemplateResponse,
    UnarchivePageTemplateCommand,
)
from app.utils.exceptions import DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


class PageTemplateService:
    """페이지 템플릿 비즈니스 로직 서비스."""

    def _to_response(self, template: PageTemplate) -> PageTemplateResponse:
        return PageTemplateResponse(
            id=str(template.id),
            name=template.name,
            file_path=template.file_path,
            description=template.description,
            is_archived=template.is_archived,
            created_at=template.created_at,
        )

    async def get_all(
        self,
        db: AsyncSession,
        query: GetAllPageTemplatesQuery,
        context: ExecutionContext,
    ) -> list[PageTemplateResponse]:
        templates: list[PageTemplate] = await page_template_repository.get_list(db, query.include_archived)
        return [self._to_response(t) for t in templates]

    async def add(
        self,
        db: AsyncSession,
        command: AddPageTemplateCommand,
        context: ExecutionContext,
    ) -> UUID:
        """새 템플릿을 생성합니다.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            command: 템플릿 추가 커맨드 (Add template command)
            context: 실행 컨텍스트 (Execution context)

        Returns:
            UUID: 생성된 템플릿 ID (Created template id)

        Raises:
            DuplicateError: 같은 이름의 템플릿 존재 (Name already used)
        """
        name: str = command.name.strip()
        if await page_template_repository.get_by_name(db, name) is not None:
            raise DuplicateError(f"A page template named '{name}' already exists")

        template: PageTemplate = await page_template_repository.create(
            db,
            {
                "name": name,
                "file_path": command.file_path.strip(),
                "description": command.description,
            },
        )
        return template.id

    async def archive(
        self,
        db: AsyncSession,
        command: ArchivePageTemplateCommand,
        context: ExecutionContext,
    ) -> None:
        await self._set_archived(db, command.page_template_id, True)

    async def unarchive(
        self,
        db: AsyncSession,
        command: UnarchivePageTemplateCommand,
        context: ExecutionContext,
    ) -> None:
        await self._set_archived(db, command.page_template_id, False)

    async def _set_archived(self, db: AsyncSession, page_template_id: UUID, is_archived: bool) -> None:
        template: PageTemplate | None = await page_template_repository.update(
            db, page_template_id, {"is_archived": is_archived}
        )
        if template is None:
            raise NotFoundError("Page template not found")
        logger.info("Page template %s archived=%s", page_template_id, is_archived)


# 싱글턴 인스턴스 — Singleton instance
page_template_service: PageTemplateService = PageTemplateService()
