"""사용자 및 역할 관련 Pydantic 스키마와 CQS 메시지 정의.

User, role and permission schemas and their commands/queries.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.cqs.base import Command, Query
from app.utils.pagination import PagedResult


# === 역할 / 권한 (Roles / permissions) ===

class PermissionResponse(BaseModel):
    """권한 응답 스키마.

    Attributes:
        code: 권한 코드 (e.g. "pages:publish")
        resource: 리소스명
        action: 액션명
        description: 설명
    """

    code: str
    resource: str
    action: str
    description: str | None = None


class RoleResponse(BaseModel):
    """역할 응답 스키마.

    Attributes:
        id: 역할 UUID (Role identifier)
        user_area_code: 사용자 영역 (User area code)
        title: 역할 이름 (Role title)
        permissions: 권한 코드 목록 (Granted permission codes, sorted)
    """

    id: str  # 역할 UUID 문자열 (Role UUID as string)
    user_area_code: str  # 사용자 영역 코드 (User area code)
    title: str  # 역할 이름 (Role title)
    permissions: list[str] = []  # 권한 코드 (Permission codes)


class AddRoleCommand(Command):
    """역할 추가 커맨드. 결과는 생성된 역할 ID.

    Attributes:
        user_area_code: 역할이 속할 사용자 영역 (User area for the role)
        title: 역할 이름, 영역 내 고유 (Title, unique per area)
        permission_codes: 부여할 권한 코드 (Permission codes to grant)
    """

    user_area_code: str
    title: str = Field(min_length=1, max_length=50)
    permission_codes: list[str] = []


class GetAllRolesQuery(Query[list[RoleResponse]]):
    user_area_code: str | None = None


class GetAllPermissionsQuery(Query[list[PermissionResponse]]):
    pass


# === 사용자 (Users) ===

class UserResponse(BaseModel):
    """사용자 응답 스키마.

    Attributes:
        id: 사용자 UUID (User identifier)
        user_area_code: 사용자 영역 (User area code)
        role_id: 역할 UUID (Role identifier)
        role_title: 역할 이름 (Role title)
        username: 로그인 아이디 (Login identifier)
        email: 이메일 (Email, nullable)
        display_name: 표시 이름 (Display name, nullable)
        require_password_change: 비밀번호 변경 필요 (Password change required)
        is_account_verified: 계정 인증 여부 (Verified flag)
        is_active: 활성 상태 (Active flag)
        last_sign_in_at: 마지막 로그인 (Last sign-in, nullable)
        created_at: 생성 일시 (Creation timestamp)
    """

    id: str
    user_area_code: str
    role_id: str
    role_title: str = ""
    username: str
    email: str | None = None
    display_name: str | None = None
    require_password_change: bool
    is_account_verified: bool
    is_active: bool
    last_sign_in_at: datetime | None = None
    created_at: datetime


class AddUserCommand(Command):
    """사용자 추가 커맨드. 결과는 생성된 사용자 ID.

    The role must belong to the same user area as the user.
    """

    user_area_code: str
    role_id: UUID
    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1)
    email: str | None = None
    display_name: str | None = None
    require_password_change: bool = False
    is_account_verified: bool = False


class GetUserByIdQuery(Query[UserResponse | None]):
    user_id: UUID


class SearchUsersQuery(Query[PagedResult[UserResponse]]):
    """사용자 검색 쿼리 (Paged user search)."""

    user_area_code: str | None = None
    role_id: UUID | None = None
    keyword: str | None = None
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1, le=100)


class SetupCmsCommand(Command):
    """최초 관리자 계정 설정 커맨드.

    Creates the CMS administrator role (with every permission), a default
    member role and the first CMS user. Rejected once any CMS user exists.
    """

    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1)
    email: str | None = None
