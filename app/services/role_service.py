"""역할 서비스 — 역할 및 권한 비즈니스 로직.

Role Service — Business logic for roles and their permission codes.
Roles belong to a user area; titles are unique within the area.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.cqs.base import ExecutionContext
from app.models.permission import Permission
from app.models.user import Role
from app.repositories.permission_repository import permission_repository
from app.repositories.role_repository import role_repository
from app.schemas.user import (
    AddRoleCommand,
    GetAllPermissionsQuery,
    GetAllRolesQuery,
    PermissionResponse,
    RoleResponse,
)
from app.user_areas import user_area_repository
from app.utils.exceptions import BadRequestError, DuplicateError

logger = logging.getLogger(__name__)


class RoleService:
    """역할 관련 비즈니스 로직을 처리하는 서비스.

    Service handling role business logic.
    """

    async def _to_response(self, db: AsyncSession, role: Role) -> RoleResponse:
        """역할 모델을 응답 스키마로 변환합니다.

        Convert a Role model instance to a RoleResponse schema, including
        its permission codes.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            role: 역할 모델 (Role model instance)

        Returns:
            RoleResponse: 역할 응답 (Role response)
        """
        codes: set[str] = await permission_repository.get_permissions_by_role_id(db, role.id)
        return RoleResponse(
            id=str(role.id),
            user_area_code=role.user_area_code,
            title=role.title,
            permissions=sorted(codes),
        )

    async def get_all_roles(
        self,
        db: AsyncSession,
        query: GetAllRolesQuery,
        context: ExecutionContext,
    ) -> list[RoleResponse]:
        """역할 목록을 조회합니다 (All roles, optionally for one user area)."""
        roles: list[Role] = await role_repository.get_by_area(db, query.user_area_code)
        return [await self._to_response(db, r) for r in roles]

    async def get_all_permissions(
        self,
        db: AsyncSession,
        query: GetAllPermissionsQuery,
        context: ExecutionContext,
    ) -> list[PermissionResponse]:
        permissions: list[Permission] = await permission_repository.get_all_permissions(db)
        return [
            PermissionResponse(code=p.code, resource=p.resource, action=p.action, description=p.description)
            for p in permissions
        ]

    async def add_role(
        self,
        db: AsyncSession,
        command: AddRoleCommand,
        context: ExecutionContext,
    ) -> UUID:
        """새 역할을 생성합니다.

        Create a role in a user area and grant the given permission codes.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            command: 역할 추가 커맨드 (Add role command)
            context: 실행 컨텍스트 (Execution context)

        Returns:
            UUID: 생성된 역할 ID (Created role id)

        Raises:
            NotFoundError: 정의되지 않은 사용자 영역 (Unknown user area)
            DuplicateError: 영역 내 역할 이름 중복 (Duplicate title in the area)
            BadRequestError: 존재하지 않는 권한 코드 (Unknown permission code)
        """
        user_area_repository.get_by_code(command.user_area_code)

        title: str = command.title.strip()
        if await role_repository.get_by_title(db, command.user_area_code, title) is not None:
            raise DuplicateError(f"A role titled '{title}' already exists in this user area")

        requested: set[str] = set(command.permission_codes)
        permissions: list[Permission] = await permission_repository.get_by_codes(db, sorted(requested))
        unknown: set[str] = requested - {p.code for p in permissions}
        if unknown:
            raise BadRequestError(f"Unknown permission codes: {', '.join(sorted(unknown))}")

        role: Role = await role_repository.create(
            db, {"user_area_code": command.user_area_code, "title": title}
        )
        await permission_repository.set_role_permissions(db, role.id, [p.id for p in permissions])
        logger.info("Role %s added to %s", role.id, role.user_area_code)
        return role.id


# 싱글턴 인스턴스 — Singleton instance
role_service: RoleService = RoleService()
