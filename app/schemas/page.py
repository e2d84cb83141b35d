"""페이지 관련 Pydantic 스키마와 CQS 메시지 정의.

Page schemas: workflow commands (add, drafts, publish, delete), admin
summaries and the render summary returned to the public site.
"""

import enum
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.cqs.base import Command, Query
from app.models.page import PublishStatus, WorkFlowStatus
from app.utils.pagination import PagedResult


class PublishStatusQuery(str, enum.Enum):
    """렌더링할 버전을 선택하는 게시 상태 필터.

    Filter selecting which version of a page to resolve.
    """

    DRAFT = "draft"  # 초안만 (Only the draft)
    LATEST = "latest"  # 가장 최신 버전 (Highest version number)
    PREFER_PUBLISHED = "prefer_published"  # 게시본 우선, 없으면 최신 (Published, else latest)
    PUBLISHED = "published"  # 게시본만 (Only the visible published version)
    SPECIFIC_VERSION = "specific_version"  # 지정한 버전 (The requested version id)


def _normalize_page_url_path(value: str) -> str:
    """페이지 경로 세그먼트를 정규화합니다. 빈 값은 디렉터리 인덱스 페이지."""
    segment: str = value.strip().strip("/").lower()
    if "/" in segment:
        raise ValueError("url_path must be a single path segment")
    return segment



# === 렌더 요약 (Render summary) ===

class OpenGraphData(BaseModel):
    """Open Graph 메타데이터 (Open Graph block)."""

    title: str | None = None
    description: str | None = None
    image_url: str | None = None


class PageRoute(BaseModel):
    """페이지 라우트 정보.

    Attributes:
        page_id: 페이지 UUID
        page_directory_id: 디렉터리 UUID
        url_path: 디렉터리 내 경로 (Path within the directory)
        full_path: 전체 경로 (e.g. "/blog/hello-world")
    """

    page_id: str
    page_directory_id: str
    url_path: str
    full_path: str


class PageRenderSummary(BaseModel):
    """페이지 렌더 요약 스키마.

    The resolved version of a page plus the page-level fields needed to
    render it.

    Attributes:
        page_id: 페이지 UUID
        page_version_id: 해석된 버전 UUID (Resolved version)
        version_number: 버전 번호
        title: 제목
        meta_description: 메타 설명
        open_graph: Open Graph 블록
        show_in_site_map: 사이트맵 노출 여부
        work_flow_status: 버전의 워크플로 상태
        page_template_id: 템플릿 UUID
        template_file_path: 템플릿 뷰 파일 경로
        created_at: 버전 생성 일시
        publish_status: 페이지 게시 상태
        publish_date: 게시 시작 일시
        last_publish_date: 마지막 게시 작업 일시
        tags: 태그 목록
        page_route: 라우트 정보
    """

    page_id: str
    page_version_id: str
    version_number: int
    title: str
    meta_description: str | None = None
    open_graph: OpenGraphData
    show_in_site_map: bool
    work_flow_status: WorkFlowStatus
    page_template_id: str
    template_file_path: str
    created_at: datetime
    publish_status: PublishStatus
    publish_date: datetime | None = None
    last_publish_date: datetime | None = None
    tags: list[str] = []
    page_route: PageRoute


class GetPageRenderSummaryByIdQuery(Query[PageRenderSummary | None]):
    """ID로 페이지 렌더 요약을 조회합니다.

    Passing page_version_id implies SPECIFIC_VERSION whatever publish_status says.
    """

    page_id: UUID
    publish_status: PublishStatusQuery = PublishStatusQuery.PUBLISHED
    page_version_id: UUID | None = None


class GetPageRenderSummariesByIdRangeQuery(Query[dict[UUID, PageRenderSummary]]):
    """여러 페이지의 렌더 요약. 해석되지 않는 페이지는 결과에서 빠집니다."""

    page_ids: list[UUID]
    publish_status: PublishStatusQuery = PublishStatusQuery.PUBLISHED


class GetPageRenderSummaryByPathQuery(Query[PageRenderSummary | None]):
    """전체 경로로 페이지 렌더 요약을 조회합니다 (e.g. "/blog/hello-world")."""

    path: str
    publish_status: PublishStatusQuery = PublishStatusQuery.PUBLISHED
    page_version_id: UUID | None = None


# === 관리자 요약 (Admin summaries) ===

class PageSummary(BaseModel):
    """관리자 페이지 목록 항목.

    Attributes:
        id: 페이지 UUID
        page_directory_id: 디렉터리 UUID
        url_path: 디렉터리 내 경로
        full_path: 전체 경로
        title: 최신 버전 제목 (Title of the latest version)
        publish_status: 게시 상태
        publish_date: 게시 시작 일시
        has_draft: 초안 존재 여부
        tags: 태그
        created_at: 생성 일시
    """

    id: str
    page_directory_id: str
    url_path: str
    full_path: str
    title: str
    publish_status: PublishStatus
    publish_date: datetime | None = None
    has_draft: bool
    tags: list[str] = []
    created_at: datetime


class PageVersionSummary(BaseModel):
    """페이지 버전 목록 항목."""

    id: str
    version_number: int
    title: str
    work_flow_status: WorkFlowStatus
    page_template_id: str
    created_at: datetime


class SearchPageSummariesQuery(Query[PagedResult[PageSummary]]):
    page_directory_id: UUID | None = None
    tag: str | None = None
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1, le=100)


class GetPageVersionSummariesByPageIdQuery(Query[list[PageVersionSummary]]):
    """페이지 버전 목록, 최신 버전부터 (Newest first)."""

    page_id: UUID


# === 워크플로 커맨드 (Workflow commands) ===

class PageVersionContent(BaseModel):
    """버전 콘텐츠 필드 묶음 (Fields stored on a page version)."""

    page_template_id: UUID
    title: str = Field(min_length=1, max_length=300)
    meta_description: str | None = None
    open_graph_title: str | None = Field(default=None, max_length=300)
    open_graph_description: str | None = None
    open_graph_image_url: str | None = Field(default=None, max_length=1000)
    show_in_site_map: bool = False


class AddPageCommand(Command, PageVersionContent):
    """페이지 추가 커맨드. 결과는 생성된 페이지 ID.

    Creates the page with version 1, as a draft or published when
    publish is set.

    Attributes:
        page_directory_id: 디렉터리 UUID
        url_path: 디렉터리 내 경로, ""이면 디렉터리 인덱스 페이지
        tags: 태그 텍스트
        publish: 즉시 게시 여부
        publish_date: 게시 시작 일시 (None이면 지금)
    """

    page_directory_id: UUID
    url_path: str = Field(default="", max_length=200)
    tags: list[str] = []
    publish: bool = False
    publish_date: datetime | None = None

    @field_validator("url_path")
    @classmethod
    def normalize_url_path(cls, value: str) -> str:
        return _normalize_page_url_path(value)


class AddPageDraftVersionCommand(Command):
    """초안 버전 추가 커맨드. 결과는 생성된 버전 ID.

    Copies copy_from_page_version_id when given, otherwise the latest version.
    """

    page_id: UUID
    copy_from_page_version_id: UUID | None = None


class UpdatePageDraftVersionCommand(Command, PageVersionContent):
    """초안 버전 수정 커맨드 (A draft is created first when none exists)."""

    page_id: UUID


class PublishPageCommand(Command):
    page_id: UUID
    publish_date: datetime | None = None


class UnpublishPageCommand(Command):
    page_id: UUID


class DeletePageDraftVersionCommand(Command):
    page_id: UUID


class UpdatePageCommand(Command):
    """페이지 수준 속성 수정 (Page-level properties: tags)."""

    page_id: UUID
    tags: list[str] = []


class DeletePageCommand(Command):
    """페이지 소프트 삭제 커맨드 (Soft delete)."""

    page_id: UUID


# === 요청 본문 (Request bodies; the page id comes from the path) ===

class AddPageDraftVersionRequest(BaseModel):
    copy_from_page_version_id: UUID | None = None


class PublishPageRequest(BaseModel):
    publish_date: datetime | None = None


class UpdatePageRequest(BaseModel):
    tags: list[str] = []
