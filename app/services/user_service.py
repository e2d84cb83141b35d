"""사용자 서비스 — 사용자 생성, 조회, 검색 및 초기 설정 비즈니스 로직.

User Service — Business logic for adding, reading and searching users
and for the initial CMS setup.
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.cqs.base import ExecutionContext
from app.models.permission import Permission
from app.models.user import Role, User
from app.repositories.page_directory_repository import page_directory_repository
from app.repositories.permission_repository import permission_repository
from app.repositories.role_repository import role_repository
from app.repositories.user_repository import normalize_username, user_repository
from app.schemas.user import (
    AddUserCommand,
    GetUserByIdQuery,
    SearchUsersQuery,
    SetupCmsCommand,
    UserResponse,
)
from app.user_areas import CMS_USER_AREA_CODE, MEMBER_USER_AREA_CODE, user_area_repository
from app.utils.exceptions import BadRequestError, DuplicateError, ForbiddenError
from app.utils.pagination import PagedResult, paginate
from app.utils.password import hash_password

logger = logging.getLogger(__name__)

# 초기 설정 시 생성되는 역할 이름 — Role titles created by the initial setup
ADMINISTRATOR_ROLE_TITLE: str = "Administrator"
MEMBER_ROLE_TITLE: str = "Member"


class UserService:
    """사용자 관련 비즈니스 로직을 처리하는 서비스.

    Service handling user business logic.
    """

    def _to_response(self, user: User) -> UserResponse:
        """사용자 모델을 응답 스키마로 변환합니다.

        Convert a User model instance to a UserResponse schema.
        Requires role relationship to be loaded.

        Args:
            user: 역할이 로드된 사용자 모델 (User model with role loaded)

        Returns:
            UserResponse: 사용자 응답 (User response)
        """
        return UserResponse(
            id=str(user.id),
            user_area_code=user.user_area_code,
            role_id=str(user.role_id),
            role_title=user.role.title if user.role else "",
            username=user.username,
            email=user.email,
            display_name=user.display_name,
            require_password_change=user.require_password_change,
            is_account_verified=user.is_account_verified,
            is_active=user.is_active,
            last_sign_in_at=user.last_sign_in_at,
            created_at=user.created_at,
        )

    async def add_user(
        self,
        db: AsyncSession,
        command: AddUserCommand,
        context: ExecutionContext,
    ) -> UUID:
        """새 사용자를 생성합니다.

        Create a user in a user area with a hashed password.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            command: 사용자 추가 커맨드 (Add user command)
            context: 실행 컨텍스트 (Execution context)

        Returns:
            UUID: 생성된 사용자 ID (Created user id)

        Raises:
            NotFoundError: 정의되지 않은 사용자 영역 (Unknown user area)
            BadRequestError: 역할이 없거나 다른 영역의 역할 (Role missing or from another area)
            DuplicateError: 영역 내 사용자명 중복 (Duplicate username in the area)
        """
        user_area_repository.get_by_code(command.user_area_code)

        role: Role | None = await role_repository.get_by_id(db, command.role_id)
        if role is None or role.user_area_code != command.user_area_code:
            raise BadRequestError("The role does not belong to the user area")

        username: str = normalize_username(command.username)
        if await user_repository.get_by_username(db, command.user_area_code, username) is not None:
            raise DuplicateError("Username already exists")

        user: User = await user_repository.create(
            db,
            {
                "user_area_code": command.user_area_code,
                "role_id": role.id,
                "username": username,
                "email": command.email,
                "display_name": command.display_name or username,
                "password_hash": hash_password(command.password),
                "require_password_change": command.require_password_change,
                "is_account_verified": command.is_account_verified,
                "last_password_change_at": context.execution_date,
            },
        )
        logger.info("User %s added to %s", user.id, user.user_area_code)
        return user.id

    async def get_user_by_id(
        self,
        db: AsyncSession,
        query: GetUserByIdQuery,
        context: ExecutionContext,
    ) -> UserResponse | None:
        user: User | None = await user_repository.get_detail(db, query.user_id)
        return self._to_response(user) if user is not None else None

    async def search_users(
        self,
        db: AsyncSession,
        query: SearchUsersQuery,
        context: ExecutionContext,
    ) -> PagedResult[UserResponse]:
        """사용자를 검색합니다 (Paged search by area, role and keyword)."""
        base = user_repository.build_search_query(query.user_area_code, query.role_id, query.keyword)
        users, total = await paginate(db, base, query.page, query.per_page)
        return PagedResult[UserResponse].build(
            [self._to_response(u) for u in users], total, query.page, query.per_page
        )

    async def setup_cms(
        self,
        db: AsyncSession,
        command: SetupCmsCommand,
        context: ExecutionContext,
    ) -> UUID:
        """최초 관리자 계정을 생성합니다.

        Create the administrator role with every permission, a default
        member role, the root page directory and the first CMS user.

        Returns:
            UUID: 생성된 관리자 ID (Created administrator id)

        Raises:
            ForbiddenError: 이미 설정 완료 (A CMS user already exists)
        """
        count: int = (
            await db.execute(
                select(func.count()).select_from(User).where(User.user_area_code == CMS_USER_AREA_CODE)
            )
        ).scalar() or 0
        if count > 0:
            raise ForbiddenError("Setup already completed")

        permissions: list[Permission] = await permission_repository.ensure_defined_permissions(db)

        admin_role: Role | None = await role_repository.get_by_title(db, CMS_USER_AREA_CODE, ADMINISTRATOR_ROLE_TITLE)
        if admin_role is None:
            admin_role = await role_repository.create(
                db, {"user_area_code": CMS_USER_AREA_CODE, "title": ADMINISTRATOR_ROLE_TITLE}
            )
        await permission_repository.set_role_permissions(db, admin_role.id, [p.id for p in permissions])

        if await role_repository.get_by_title(db, MEMBER_USER_AREA_CODE, MEMBER_ROLE_TITLE) is None:
            await role_repository.create(db, {"user_area_code": MEMBER_USER_AREA_CODE, "title": MEMBER_ROLE_TITLE})

        await page_directory_repository.get_or_create_root(db)

        user_id: UUID = await self.add_user(
            db,
            AddUserCommand(
                user_area_code=CMS_USER_AREA_CODE,
                role_id=admin_role.id,
                username=command.username,
                password=command.password,
                email=command.email,
                is_account_verified=True,
            ),
            context,
        )
        logger.info("CMS setup completed with administrator %s", user_id)
        return user_id


# 싱글턴 인스턴스 — Singleton instance
user_service: UserService = UserService()
