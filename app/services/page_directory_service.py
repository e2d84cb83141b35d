"""페이지 디렉터리 서비스 — 디렉터리 트리 비즈니스 로직.

Page Directory Service — add, read, list and delete directories.
All directories hang under a single root directory (no parent, empty
url path) which is created on demand.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.cqs.base import ExecutionContext
from app.models.page_directory import PageDirectory
from app.repositories.page_directory_repository import (
    build_full_path,
    page_directory_repository,
    walk_chain,
)
from app.schemas.page_directory import (
    AddPageDirectoryCommand,
    DeletePageDirectoryCommand,
    GetAllPageDirectoriesQuery,
    GetPageDirectoryByIdQuery,
    PageDirectoryAccessRuleResponse,
    PageDirectoryResponse,
)
from app.services.access_rule_service import parse_violation_action
from app.utils.exceptions import BadRequestError, DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


class PageDirectoryService:
    """페이지 디렉터리 비즈니스 로직 서비스."""

    def _to_response(self, directory: PageDirectory, full_path: str) -> PageDirectoryResponse:
        """디렉터리 모델을 응답 스키마로 변환합니다.

        Raises:
            InvariantViolationError: 저장된 위반 동작을 해석할 수 없음 (Unparseable action)
        """
        return PageDirectoryResponse(
            id=str(directory.id),
            parent_page_directory_id=(
                str(directory.parent_page_directory_id) if directory.parent_page_directory_id else None
            ),
            name=directory.name,
            url_path=directory.url_path,
            full_path=full_path,
            access_rule_violation_action=parse_violation_action(
                directory.access_rule_violation_action_id, directory.id
            ),
            user_area_code_for_login_redirect=directory.user_area_code_for_login_redirect,
            access_rules=[
                PageDirectoryAccessRuleResponse(
                    id=str(rule.id),
                    user_area_code=rule.user_area_code,
                    role_id=str(rule.role_id) if rule.role_id else None,
                )
                for rule in directory.access_rules
            ],
            created_at=directory.created_at,
        )

    async def get_full_path(self, db: AsyncSession, page_directory_id: UUID) -> str:
        return build_full_path(await page_directory_repository.get_chain(db, page_directory_id))

    async def get_by_id(
        self,
        db: AsyncSession,
        query: GetPageDirectoryByIdQuery,
        context: ExecutionContext,
    ) -> PageDirectoryResponse | None:
        """ID로 디렉터리를 조회합니다 (with the computed full path)."""
        directory: PageDirectory | None = await page_directory_repository.get_by_id(db, query.page_directory_id)
        if directory is None:
            return None
        return self._to_response(directory, await self.get_full_path(db, directory.id))

    async def get_all(
        self,
        db: AsyncSession,
        query: GetAllPageDirectoriesQuery,
        context: ExecutionContext,
    ) -> list[PageDirectoryResponse]:
        """전체 디렉터리 목록을 전체 경로 순으로 조회합니다."""
        directories: list[PageDirectory] = await page_directory_repository.get_list(db)
        by_id: dict[UUID, PageDirectory] = {d.id: d for d in directories}

        responses: list[PageDirectoryResponse] = []
        for directory in directories:
            chain: list[PageDirectory] = walk_chain(by_id, directory.id)
            responses.append(self._to_response(directory, build_full_path(chain)))
        return sorted(responses, key=lambda r: r.full_path)

    async def add(
        self,
        db: AsyncSession,
        command: AddPageDirectoryCommand,
        context: ExecutionContext,
    ) -> UUID:
        """새 디렉터리를 생성합니다.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            command: 디렉터리 추가 커맨드 (Add directory command)
            context: 실행 컨텍스트 (Execution context)

        Returns:
            UUID: 생성된 디렉터리 ID (Created directory id)

        Raises:
            NotFoundError: 부모 디렉터리 없음 (Unknown parent directory)
            DuplicateError: 형제 디렉터리와 경로 중복 (Path already used by a sibling)
        """
        if command.parent_page_directory_id is None:
            parent: PageDirectory | None = await page_directory_repository.get_or_create_root(db)
        else:
            parent = await page_directory_repository.get_by_id(db, command.parent_page_directory_id)
            if parent is None:
                raise NotFoundError("Parent page directory not found")

        existing = await page_directory_repository.get_by_parent_and_path(db, parent.id, command.url_path)
        if existing is not None:
            raise DuplicateError(f"A directory with the path '{command.url_path}' already exists here")

        directory: PageDirectory = await page_directory_repository.create(
            db,
            {
                "parent_page_directory_id": parent.id,
                "name": command.name.strip(),
                "url_path": command.url_path,
            },
        )
        logger.info("Page directory %s added under %s", directory.id, parent.id)
        return directory.id

    async def delete(
        self,
        db: AsyncSession,
        command: DeletePageDirectoryCommand,
        context: ExecutionContext,
    ) -> None:
        """디렉터리를 삭제합니다.

        Raises:
            NotFoundError: 디렉터리 없음 (Unknown directory)
            BadRequestError: 루트, 하위 디렉터리 또는 페이지가 있는 디렉터리
                             (Root directory, or a directory that is not empty)
        """
        directory: PageDirectory | None = await page_directory_repository.get_by_id(db, command.page_directory_id)
        if directory is None:
            raise NotFoundError("Page directory not found")
        if directory.parent_page_directory_id is None:
            raise BadRequestError("The root directory cannot be deleted")
        if await page_directory_repository.has_children(db, directory.id):
            raise BadRequestError("Delete the child directories first")
        if await page_directory_repository.has_pages(db, directory.id):
            raise BadRequestError("The directory still contains pages")

        await db.delete(directory)
        await db.flush()
        logger.info("Page directory %s deleted", command.page_directory_id)


# 싱글턴 인스턴스 — Singleton instance
page_directory_service: PageDirectoryService = PageDirectoryService()
