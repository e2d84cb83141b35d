"""페이지 디렉터리 레포지토리 — 디렉터리 트리 및 접근 규칙 쿼리.

Page directory repository — tree navigation and access rule queries.
"""

from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.page import Page
from app.models.page_directory import PageDirectory
from app.repositories.base import BaseRepository


class PageDirectoryRepository(BaseRepository[PageDirectory]):
    """page_directories 테이블 쿼리를 담당하는 레포지토리.

    Repository for the page_directories table. Access rules are loaded
    with every directory through the relationship's selectin strategy.
    """

    def __init__(self) -> None:
        super().__init__(PageDirectory)

    async def get_root(self, db: AsyncSession) -> PageDirectory | None:
        """루트 디렉터리를 조회합니다 (The single directory with no parent).

        Raises:
            MultipleResultsFound: 루트가 둘 이상 (More than one root row)
        """
        result = await db.execute(
            select(PageDirectory).where(PageDirectory.parent_page_directory_id.is_(None))
        )
        return result.scalar_one_or_none()

    async def get_or_create_root(self, db: AsyncSession) -> PageDirectory:
        """루트 디렉터리를 조회하고, 없으면 생성합니다.

        Retrieve the root directory, creating it when the tree is empty.
        The insert runs in a savepoint; when a concurrent request created
        the root first, the unique index rejects ours and theirs is read.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)

        Returns:
            PageDirectory: 루트 디렉터리 (The root directory)
        """
        root: PageDirectory | None = await self.get_root(db)
        if root is not None:
            return root
        try:
            async with db.begin_nested():
                root = PageDirectory(name="Root", url_path="", parent_page_directory_id=None)
                db.add(root)
        except IntegrityError:
            return await self.get_root(db)
        await db.refresh(root)
        return root

    async def get_by_parent_and_path(
        self,
        db: AsyncSession,
        parent_page_directory_id: UUID,
        url_path: str,
    ) -> PageDirectory | None:
        """부모 디렉터리와 경로 세그먼트로 조회합니다."""
        result = await db.execute(
            select(PageDirectory).where(
                PageDirectory.parent_page_directory_id == parent_page_directory_id,
                PageDirectory.url_path == url_path,
            )
        )
        return result.scalar_one_or_none()

    async def get_list(self, db: AsyncSession) -> list[PageDirectory]:
        """전체 디렉터리 목록 (Every directory, ordered by name)."""
        query: Select = select(PageDirectory).order_by(PageDirectory.name)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_chain(
        self,
        db: AsyncSession,
        page_directory_id: UUID,
    ) -> list[PageDirectory]:
        """디렉터리부터 루트까지의 조상 체인을 반환합니다.

        Return the directory followed by each of its ancestors up to and
        including the root. An unknown id returns an empty list.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            page_directory_id: 시작 디렉터리 ID (Directory to start from)

        Returns:
            list[PageDirectory]: [directory, parent, ..., root]
        """
        by_id: dict[UUID, PageDirectory] = {d.id: d for d in await self.get_list(db)}
        return walk_chain(by_id, page_directory_id)

    async def has_children(self, db: AsyncSession, page_directory_id: UUID) -> bool:
        query = select(func.count()).select_from(PageDirectory).where(
            PageDirectory.parent_page_directory_id == page_directory_id
        )
        return ((await db.execute(query)).scalar() or 0) > 0

    async def has_pages(self, db: AsyncSession, page_directory_id: UUID) -> bool:
        # 소프트 삭제된 페이지도 FK를 유지하므로 함께 센다
        query = select(func.count()).select_from(Page).where(
            Page.page_directory_id == page_directory_id
        )
        return ((await db.execute(query)).scalar() or 0) > 0


def walk_chain(by_id: dict[UUID, PageDirectory], page_directory_id: UUID) -> list[PageDirectory]:
    """미리 로드한 디렉터리로 [directory, parent, ..., root] 체인을 만듭니다."""
    chain: list[PageDirectory] = []
    current: PageDirectory | None = by_id.get(page_directory_id)
    while current is not None and current not in chain:
        chain.append(current)
        parent_id = current.parent_page_directory_id
        current = by_id.get(parent_id) if parent_id is not None else None
    return chain


def build_full_path(chain: list[PageDirectory]) -> str:
    """조상 체인으로 전체 URL 경로를 만듭니다.

    Build "/a/b" from a [b, a, root] chain; the root alone maps to "/".
    """
    segments: list[str] = [d.url_path for d in reversed(chain) if d.url_path]
    return "/" + "/".join(segments)


# 싱글턴 인스턴스 — Singleton instance
page_directory_repository: PageDirectoryRepository = PageDirectoryRepository()
