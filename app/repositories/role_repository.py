"""역할 레포지토리 — 역할 조회 및 중복 검사 쿼리.

Role Repository — Lookup and duplicate-check queries for roles.
Extends BaseRepository with Role-specific database operations.
"""

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Role
from app.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """역할 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the roles table.
    Provides area-scoped role retrieval and duplicate checking.
    """

    def __init__(self) -> None:
        """RoleRepository를 초기화합니다.

        Initialize the RoleRepository with the Role model.
        """
        super().__init__(Role)

    async def get_by_area(
        self,
        db: AsyncSession,
        user_area_code: str | None = None,
    ) -> list[Role]:
        """사용자 영역의 역할을 이름 순으로 조회합니다.

        Retrieve roles ordered by area and title, optionally limited to one area.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_area_code: 사용자 영역 코드, None이면 전체
                            (User area code; None returns every role)

        Returns:
            list[Role]: 역할 목록 (List of roles)
        """
        query: Select = select(Role).order_by(Role.user_area_code, Role.title)
        if user_area_code is not None:
            query = query.where(Role.user_area_code == user_area_code)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_by_title(
        self,
        db: AsyncSession,
        user_area_code: str,
        title: str,
    ) -> Role | None:
        """영역 내 역할 이름으로 조회합니다 (Find a role by title within an area)."""
        result = await db.execute(
            select(Role).where(Role.user_area_code == user_area_code, Role.title == title)
        )
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
role_repository: RoleRepository = RoleRepository()
