"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: 역할 및 사용자 (Role and User)
    permission: 권한 및 역할-권한 매핑 (Permission, RolePermission)
    token: 리프레시 토큰 (Refresh tokens)
    authentication: 실패한 인증 시도, 인가 작업 (Failed attempts, authorized tasks)
    page_template: 페이지 템플릿 (Page templates)
    page_directory: 디렉터리 및 접근 규칙 (Directories and access rules)
    page: 페이지, 버전, 태그 (Pages, versions, tags)
    rewrite_rule: 리라이트 규칙 (Rewrite rules)
"""

from app.models.user import Role, User
from app.models.permission import Permission, RolePermission
from app.models.token import RefreshToken
from app.models.authentication import AuthorizedTask, FailedAuthenticationAttempt
from app.models.page_template import PageTemplate
from app.models.page_directory import PageDirectory, PageDirectoryAccessRule
from app.models.page import Page, PageVersion, Tag
from app.models.rewrite_rule import RewriteRule

__all__ = [
    "Role", "User",
    "Permission", "RolePermission",
    "RefreshToken",
    "AuthorizedTask", "FailedAuthenticationAttempt",
    "PageTemplate",
    "PageDirectory", "PageDirectoryAccessRule",
    "Page", "PageVersion", "Tag",
    "RewriteRule",
]
