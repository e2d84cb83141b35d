"""페이지 디렉터리 및 접근 규칙 스키마와 CQS 메시지.

Page directory and access rule schemas and commands/queries.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.cqs.base import Command, Query
from app.models.page_directory import AccessRuleViolationAction


class PageDirectoryAccessRuleResponse(BaseModel):
    """접근 규칙 응답 (Stored access rule)."""

    id: str
    user_area_code: str
    role_id: str | None = None


class PageDirectoryResponse(BaseModel):
    """페이지 디렉터리 응답 스키마.

    Attributes:
        id: 디렉터리 UUID
        parent_page_directory_id: 부모 디렉터리 UUID (None이면 루트)
        name: 이름
        url_path: 경로 세그먼트
        full_path: 루트부터의 전체 경로 (e.g. "/blog/news")
        access_rule_violation_action: 위반 동작
        user_area_code_for_login_redirect: 로그인 리디렉션 영역
        access_rules: 접근 규칙 목록
        created_at: 생성 일시
    """

    id: str
    parent_page_directory_id: str | None = None
    name: str
    url_path: str
    full_path: str
    access_rule_violation_action: AccessRuleViolationAction
    user_area_code_for_login_redirect: str | None = None
    access_rules: list[PageDirectoryAccessRuleResponse] = []
    created_at: datetime


class AddPageDirectoryCommand(Command):
    """디렉터리 추가 커맨드. 결과는 생성된 디렉터리 ID.

    Attributes:
        name: 표시 이름 (Display name)
        url_path: 경로 세그먼트, 형제 간 고유 (Path segment, unique among siblings)
        parent_page_directory_id: 부모 디렉터리, None이면 루트 아래
                                  (Parent directory; None places it under the root)
    """

    name: str = Field(min_length=1, max_length=200)
    url_path: str = Field(min_length=1, max_length=200)
    parent_page_directory_id: UUID | None = None

    @field_validator("url_path")
    @classmethod
    def normalize_url_path(cls, value: str) -> str:
        segment: str = value.strip().strip("/").lower()
        if not segment or "/" in segment:
            raise ValueError("url_path must be a single path segment")
        return segment


class GetPageDirectoryByIdQuery(Query[PageDirectoryResponse | None]):
    page_directory_id: UUID


class GetAllPageDirectoriesQuery(Query[list[PageDirectoryResponse]]):
    pass


class DeletePageDirectoryCommand(Command):
    page_directory_id: UUID


class UpdateAccessRuleItem(BaseModel):
    """접근 규칙 항목.

    Attributes:
        page_directory_access_rule_id: 기존 규칙 ID, None이면 새 규칙
                                       (Existing rule id; None adds a rule)
        user_area_code: 허용 영역 (Allowed user area)
        role_id: 허용 역할, None이면 영역 전체 (Allowed role; None allows the whole area)
    """

    page_directory_access_rule_id: UUID | None = None
    user_area_code: str
    role_id: UUID | None = None


class AccessRuleSetRequest(BaseModel):
    """접근 규칙 집합 갱신 요청 본문 (Request body; the directory comes from the path)."""

    violation_action: AccessRuleViolationAction = AccessRuleViolationAction.ERROR
    user_area_code_for_login_redirect: str | None = None
    access_rules: list[UpdateAccessRuleItem] = []


class UpdatePageDirectoryAccessRuleSetCommand(Command):
    """디렉터리 접근 규칙 일괄 갱신 커맨드.

    Rules with an id are updated, rules without one are added and stored
    rules missing from the list are deleted.
    """

    page_directory_id: UUID
    violation_action: AccessRuleViolationAction = AccessRuleViolationAction.ERROR
    user_area_code_for_login_redirect: str | None = None
    access_rules: list[UpdateAccessRuleItem] = []


class GetUpdatePageDirectoryAccessRuleSetCommandByIdQuery(
    Query[UpdatePageDirectoryAccessRuleSetCommand | None]
):
    """저장된 규칙으로 채운 갱신 커맨드를 조회합니다."""

    page_directory_id: UUID


class EnforcePageDirectoryAccessRulesQuery(Query[None]):
    """디렉터리 체인의 접근 규칙을 호출자에게 적용합니다.

    Raises when the caller does not satisfy the access rules of the
    directory or any of its ancestors; returns nothing otherwise.
    """

    page_directory_id: UUID
