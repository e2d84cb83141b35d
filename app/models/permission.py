"""Permission 및 RolePermission SQLAlchemy ORM 모델 정의.

Permission-Based RBAC를 위한 권한 및 역할-권한 매핑 테이블.
CQS 핸들러는 권한 코드(resource:action)를 선언하고, mediator가 호출자 역할의
권한 집합과 비교한다.

Tables:
    - permissions: 글로벌 권한 목록 (resource:action 형식)
    - role_permissions: 역할별 권한 매핑 (role ↔ permission)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Permission(Base):
    """권한 모델 — 시스템 전체 권한 정의.

    Attributes:
        id: 고유 식별자 UUID
        code: 권한 코드 (e.g. "pages:publish")
        resource: 리소스명 (e.g. "pages")
        action: 액션명 (e.g. "publish")
        description: 설명
        created_at: 생성 일시
    """

    __tablename__ = "permissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    resource: Mapped[str] = mapped_column(String(50), nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("resource", "action", name="idx_permissions_resource_action"),
    )

    role_permissions = relationship("RolePermission", back_populates="permission")


class RolePermission(Base):
    """역할-권한 매핑 모델.

    Attributes:
        id: 고유 식별자 UUID
        role_id: 역할 FK
        permission_id: 권한 FK
        created_at: 생성 일시
    """

    __tablename__ = "role_permissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    role_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)
    permission_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
    )

    role = relationship("Role", back_populates="role_permissions")
    permission = relationship("Permission", back_populates="role_permissions")


# 시스템 권한 정의 — (code, resource, action, description)
# 마이그레이션과 시드 스크립트가 이 목록으로 permissions 테이블을 채운다
PERMISSION_DEFINITIONS: list[tuple[str, str, str, str]] = [
    ("pages:create", "pages", "create", "페이지 생성"),
    ("pages:read", "pages", "read", "페이지 조회"),
    ("pages:update", "pages", "update", "페이지 수정"),
    ("pages:delete", "pages", "delete", "페이지 삭제"),
    ("pages:publish", "pages", "publish", "페이지 게시/게시 취소"),
    ("page_directories:create", "page_directories", "create", "디렉터리 생성"),
    ("page_directories:read", "page_directories", "read", "디렉터리 조회"),
    ("page_directories:update", "page_directories", "update", "디렉터리 수정 및 접근 규칙"),
    ("page_directories:delete", "page_directories", "delete", "디렉터리 삭제"),
    ("page_templates:create", "page_templates", "create", "템플릿 생성"),
    ("page_templates:read", "page_templates", "read", "템플릿 조회"),
    ("page_templates:update", "page_templates", "update", "템플릿 보관/복원"),
    ("users:create", "users", "create", "사용자 생성"),
    ("users:read", "users", "read", "사용자 조회"),
    ("users:update", "users", "update", "사용자 수정"),
    ("roles:create", "roles", "create", "역할 생성"),
    ("roles:read", "roles", "read", "역할 조회"),
    ("rewrite_rules:create", "rewrite_rules", "create", "리라이트 규칙 생성"),
    ("rewrite_rules:read", "rewrite_rules", "read", "리라이트 규칙 조회"),
    ("rewrite_rules:delete", "rewrite_rules", "delete", "리라이트 규칙 삭제"),
]
