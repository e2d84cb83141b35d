"""페이지 디렉터리 및 접근 규칙 SQLAlchemy ORM 모델 정의.

Page directory and access rule ORM models.
Directories form a tree under a single root (no parent, empty url path).
Each directory may restrict access to its pages with access rules; a rule
names a user area and optionally a role within that area.

Tables:
    - page_directories: 디렉터리 트리 (Hierarchical page containers)
    - page_directory_access_rules: 디렉터리 접근 규칙 (UserAreaCode + RoleId pairs)
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class AccessRuleViolationAction(enum.IntEnum):
    """접근 규칙 위반 시 동작.

    Action taken when a caller does not satisfy a directory's access rules.
    Stored as an integer id on the directory row.
    """

    ERROR = 0  # 403 응답 (Respond with an error)
    NOT_FOUND = 1  # 404 응답 — 페이지 존재를 숨김 (Hide the page's existence)


class PageDirectory(Base):
    """페이지 디렉터리 모델.

    Attributes:
        id: 고유 식별자 UUID
        parent_page_directory_id: 부모 디렉터리 FK (None이면 루트, None for root)
        name: 디렉터리 이름 (Display name)
        url_path: URL 경로 세그먼트 (Path segment, unique among siblings)
        access_rule_violation_action_id: 위반 동작 id (AccessRuleViolationAction value)
        user_area_code_for_login_redirect: 로그인 리디렉션 영역 (Area to sign in to when anonymous)
        created_at: 생성 일시 UTC
    """

    __tablename__ = "page_directories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    parent_page_directory_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("page_directories.id"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    url_path: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    access_rule_violation_action_id: Mapped[int] = mapped_column(
        Integer, nullable=False, default=AccessRuleViolationAction.ERROR.value
    )
    user_area_code_for_login_redirect: Mapped[str | None] = mapped_column(String(3), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("parent_page_directory_id", "url_path", name="uq_page_directory_parent_path"),
        # 루트는 하나뿐 — NULL 부모끼리는 위 제약에 걸리지 않음 (NULL parents never collide above)
        Index(
            "uq_page_directory_root",
            "url_path",
            unique=True,
            postgresql_where=text("parent_page_directory_id IS NULL"),
            sqlite_where=text("parent_page_directory_id IS NULL"),
        ),
    )

    # 관계 — Relationships
    parent = relationship("PageDirectory", remote_side=[id])
    access_rules = relationship(
        "PageDirectoryAccessRule",
        back_populates="page_directory",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PageDirectoryAccessRule.created_at",
    )
    pages = relationship("Page", back_populates="page_directory")


class PageDirectoryAccessRule(Base):
    """디렉터리 접근 규칙 모델.

    Attributes:
        id: 고유 식별자 UUID
        page_directory_id: 대상 디렉터리 FK
        user_area_code: 허용 사용자 영역 (User area allowed by the rule)
        role_id: 허용 역할 FK (None이면 영역 내 모든 사용자, None allows any role in the area)
        created_at: 생성 일시 UTC
    """

    __tablename__ = "page_directory_access_rules"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    page_directory_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("page_directories.id", ondelete="CASCADE"), nullable=False
    )
    user_area_code: Mapped[str] = mapped_column(String(3), nullable=False)
    role_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("roles.id", ondelete="CASCADE"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    page_directory = relationship("PageDirectory", back_populates="access_rules")
