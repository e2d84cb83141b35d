"""사용자 레포지토리 — 사용자 조회 및 검색 쿼리.

User Repository — Lookup and search queries for users.
Extends BaseRepository with User-specific database operations
including area-scoped username lookup and eager loading of roles.
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        """UserRepository를 초기화합니다.

        Initialize the UserRepository with the User model.
        """
        super().__init__(User)

    async def get_by_username(
        self,
        db: AsyncSession,
        user_area_code: str,
        username: str,
    ) -> User | None:
        """영역 내 사용자명으로 사용자를 조회합니다.

        Retrieve a user by username within a user area, with role loaded.
        Usernames are stored lower-cased, so the lookup is case-insensitive.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_area_code: 사용자 영역 코드 (User area code)
            username: 조회할 사용자명 (Username to look up)

        Returns:
            User | None: 조회된 사용자 또는 None (Found user or None)
        """
        query: Select = (
            select(User)
            .options(selectinload(User.role))
            .where(
                User.user_area_code == user_area_code,
                User.username == normalize_username(username),
            )
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_detail(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> User | None:
        """사용자 상세 정보를 역할과 함께 조회합니다.

        Retrieve user detail with role eagerly loaded.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 ID (User UUID)

        Returns:
            User | None: 역할이 로드된 사용자 또는 None
                         (User with role loaded, or None)
        """
        query: Select = (
            select(User)
            .options(selectinload(User.role))
            .where(User.id == user_id)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    def build_search_query(
        self,
        user_area_code: str | None = None,
        role_id: UUID | None = None,
        keyword: str | None = None,
    ) -> Select:
        """사용자 검색 쿼리를 생성합니다 (Build the base query for user search)."""
        query: Select = select(User).options(selectinload(User.role))
        if user_area_code is not None:
            query = query.where(User.user_area_code == user_area_code)
        if role_id is not None:
            query = query.where(User.role_id == role_id)
        if keyword:
            pattern: str = f"%{keyword.lower()}%"
            query = query.where(User.username.like(pattern) | User.email.ilike(pattern))
        return query.order_by(User.username)


def normalize_username(username: str) -> str:
    """사용자명 정규화 — 앞뒤 공백 제거 후 소문자 (Trim and lower-case)."""
    return username.strip().lower()


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
