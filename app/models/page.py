"""페이지, 페이지 버전, 태그 SQLAlchemy ORM 모델 정의.

Page, page version and tag ORM models.

A page owns an ordered list of versions. At most one version is a Draft;
every version that has been published keeps the Published status, and the
one with the highest version number is the page's current published
content. Whether the page is visible at all is controlled by the page's
own publish status and publish date. Pages are soft-deleted.

Tables:
    - pages: 페이지 (URL placement, publish status, soft delete)
    - page_versions: 페이지 버전 (Versioned content and template reference)
    - tags: 태그 (Unique tag texts)
    - page_tags: 페이지-태그 매핑 (Page ↔ tag association)
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class WorkFlowStatus(str, enum.Enum):
    """페이지 버전 워크플로 상태 (Work flow status of a page version)."""

    DRAFT = "draft"
    PUBLISHED = "published"


class PublishStatus(str, enum.Enum):
    """페이지 게시 상태 (Publish status of the page as a whole)."""

    UNPUBLISHED = "unpublished"
    PUBLISHED = "published"


# 페이지-태그 연결 테이블 — Page/tag association table
page_tags: Table = Table(
    "page_tags",
    Base.metadata,
    Column("page_id", Uuid, ForeignKey("pages.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    """태그 모델.

    Attributes:
        id: 고유 식별자 UUID
        tag_text: 태그 텍스트 (Tag text, unique)
        created_at: 생성 일시 UTC
    """

    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tag_text: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class Page(Base):
    """페이지 모델.

    Attributes:
        id: 고유 식별자 UUID
        page_directory_id: 소속 디렉터리 FK (Parent directory)
        url_path: URL 경로 (Path within the directory, "" for the directory index page)
        publish_status: 게시 상태 (PublishStatus value)
        publish_date: 게시 시작 일시 (Page is visible as published from this date)
        last_publish_date: 마지막 게시 작업 일시 (When the page was last published)
        created_by_user_id: 생성자 FK (Creator, optional)
        created_at: 생성 일시 UTC
        updated_at: 수정 일시 UTC
        deleted_at: 삭제 일시 (Soft delete marker)
    """

    __tablename__ = "pages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    page_directory_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("page_directories.id"), nullable=False
    )
    url_path: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    publish_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PublishStatus.UNPUBLISHED.value
    )
    publish_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_publish_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # 관계 — Relationships
    page_directory = relationship("PageDirectory", back_populates="pages")
    versions = relationship(
        "PageVersion",
        back_populates="page",
        cascade="all, delete-orphan",
        order_by="PageVersion.version_number",
    )
    tags = relationship("Tag", secondary=page_tags, lazy="selectin", order_by="Tag.tag_text")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class PageVersion(Base):
    """페이지 버전 모델.

    Attributes:
        id: 고유 식별자 UUID
        page_id: 소속 페이지 FK
        version_number: 페이지 내 버전 번호 (1부터 증가, monotonically increasing per page)
        page_template_id: 템플릿 FK
        title: 제목
        meta_description: 메타 설명
        open_graph_title: OG 제목
        open_graph_description: OG 설명
        open_graph_image_url: OG 이미지 URL
        show_in_site_map: 사이트맵 노출 여부
        work_flow_status: 워크플로 상태 (WorkFlowStatus value)
        created_by_user_id: 생성자 FK
        created_at: 생성 일시 UTC
    """

    __tablename__ = "page_versions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    page_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False)
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    page_template_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("page_templates.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    meta_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    open_graph_title: Mapped[str | None] = mapped_column(String(300), nullable=True)
    open_graph_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    open_graph_image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    show_in_site_map: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    work_flow_status: Mapped[str] = mapped_column(String(20), nullable=False, default=WorkFlowStatus.DRAFT.value)
    created_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("page_id", "version_number", name="uq_page_version_number"),
    )

    page = relationship("Page", back_populates="versions")
    page_template = relationship("PageTemplate", back_populates="page_versions")
