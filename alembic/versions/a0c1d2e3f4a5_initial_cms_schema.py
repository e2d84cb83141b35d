"""initial_cms_schema

Revision ID: a0c1d2e3f4a5
Revises:
Create Date: 2026-10-19 09:00:00.000000

CMS 초기 스키마:
- roles, users, permissions, role_permissions 생성
- refresh_tokens, failed_authentication_attempts, authorized_tasks 생성
- page_templates, page_directories, page_directory_access_rules 생성
- pages, page_versions, tags, page_tags, rewrite_rules 생성
- permissions seed (20개)
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

from app.models.permission import PERMISSION_DEFINITIONS

revision: str = "a0c1d2e3f4a5"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column("id", UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), primary_key=True)


def _created_at_column() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def upgrade() -> None:
    # 1. 역할 / 사용자
    op.create_table(
        "roles",
        _id_column(),
        sa.Column("user_area_code", sa.String(3), nullable=False),
        sa.Column("title", sa.String(50), nullable=False),
        _created_at_column(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("user_area_code", "title", name="uq_role_area_title"),
    )

    op.create_table(
        "users",
        _id_column(),
        sa.Column("user_area_code", sa.String(3), nullable=False),
        sa.Column("role_id", UUID(as_uuid=True), sa.ForeignKey("roles.id"), nullable=False),
        sa.Column("username", sa.String(150), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("display_name", sa.String(150), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("require_password_change", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("is_account_verified", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("last_sign_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_password_change_at", sa.DateTime(timezone=True), nullable=True),
        _created_at_column(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("user_area_code", "username", name="uq_user_area_username"),
    )
    op.create_index("idx_users_role_id", "users", ["role_id"])

    # 2. 권한
    op.create_table(
        "permissions",
        _id_column(),
        sa.Column("code", sa.String(100), unique=True, nullable=False),
        sa.Column("resource", sa.String(50), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        _created_at_column(),
    )
    op.create_index("idx_permissions_resource_action", "permissions", ["resource", "action"], unique=True)

    op.create_table(
        "role_permissions",
        _id_column(),
        sa.Column("role_id", UUID(as_uuid=True), sa.ForeignKey("roles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("permission_id", UUID(as_uuid=True), sa.ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False),
        _created_at_column(),
        sa.UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
    )
    op.create_index("idx_role_permissions_role_id", "role_permissions", ["role_id"])

    # 3. 인증
    op.create_table(
        "refresh_tokens",
        _id_column(),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token", sa.String(512), unique=True, nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _created_at_column(),
    )

    op.create_table(
        "failed_authentication_attempts",
        _id_column(),
        sa.Column("user_area_code", sa.String(3), nullable=False),
        sa.Column("username", sa.String(150), nullable=False),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("attempt_date", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index(
        "ix_failed_auth_area_username_date",
        "failed_authentication_attempts",
        ["user_area_code", "username", "attempt_date"],
    )
    op.create_index("ix_failed_auth_ip_date", "failed_authentication_attempts", ["ip_address", "attempt_date"])

    op.create_table(
        "authorized_tasks",
        _id_column(),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("task_type", sa.String(50), nullable=False),
        sa.Column("token", sa.String(128), unique=True, nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _created_at_column(),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("invalidated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_authorized_tasks_user_type", "authorized_tasks", ["user_id", "task_type"])

    # 4. 템플릿 / 디렉터리
    op.create_table(
        "page_templates",
        _id_column(),
        sa.Column("name", sa.String(100), unique=True, nullable=False),
        sa.Column("file_path", sa.String(400), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_archived", sa.Boolean, nullable=False, server_default=sa.text("false")),
        _created_at_column(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "page_directories",
        _id_column(),
        sa.Column("parent_page_directory_id", UUID(as_uuid=True), sa.ForeignKey("page_directories.id"), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("url_path", sa.String(200), nullable=False, server_default=""),
        # 0 = Error, 1 = NotFound
        sa.Column("access_rule_violation_action_id", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("user_area_code_for_login_redirect", sa.String(3), nullable=True),
        _created_at_column(),
        sa.UniqueConstraint("parent_page_directory_id", "url_path", name="uq_page_directory_parent_path"),
    )

    op.create_table(
        "page_directory_access_rules",
        _id_column(),
        sa.Column(
            "page_directory_id",
            UUID(as_uuid=True),
            sa.ForeignKey("page_directories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_area_code", sa.String(3), nullable=False),
        sa.Column("role_id", UUID(as_uuid=True), sa.ForeignKey("roles.id", ondelete="CASCADE"), nullable=True),
        _created_at_column(),
    )
    op.create_index(
        "uq_page_directory_root",
        "page_directories",
        ["url_path"],
        unique=True,
        postgresql_where=sa.text("parent_page_directory_id IS NULL"),
    )
    op.create_index(
        "idx_page_directory_access_rules_directory_id", "page_directory_access_rules", ["page_directory_id"]
    )

    # 5. 페이지 / 버전 / 태그
    op.create_table(
        "pages",
        _id_column(),
        sa.Column("page_directory_id", UUID(as_uuid=True), sa.ForeignKey("page_directories.id"), nullable=False),
        sa.Column("url_path", sa.String(200), nullable=False, server_default=""),
        sa.Column("publish_status", sa.String(20), nullable=False, server_default="unpublished"),
        sa.Column("publish_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_publish_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_by_user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
        ),
        _created_at_column(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("idx_pages_directory_path", "pages", ["page_directory_id", "url_path"])

    op.create_table(
        "page_versions",
        _id_column(),
        sa.Column("page_id", UUID(as_uuid=True), sa.ForeignKey("pages.id", ondelete="CASCADE"), nullable=False),
        sa.Column("version_number", sa.Integer, nullable=False),
        sa.Column("page_template_id", UUID(as_uuid=True), sa.ForeignKey("page_templates.id"), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("meta_description", sa.Text, nullable=True),
        sa.Column("open_graph_title", sa.String(300), nullable=True),
        sa.Column("open_graph_description", sa.Text, nullable=True),
        sa.Column("open_graph_image_url", sa.String(1000), nullable=True),
        sa.Column("show_in_site_map", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("work_flow_status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column(
            "created_by_user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
        ),
        _created_at_column(),
        sa.UniqueConstraint("page_id", "version_number", name="uq_page_version_number"),
    )

    op.create_table(
        "tags",
        _id_column(),
        sa.Column("tag_text", sa.String(50), unique=True, nullable=False),
        _created_at_column(),
    )

    op.create_table(
        "page_tags",
        sa.Column("page_id", UUID(as_uuid=True), sa.ForeignKey("pages.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("tag_id", UUID(as_uuid=True), sa.ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    )

    # 6. 리라이트 규칙
    op.create_table(
        "rewrite_rules",
        _id_column(),
        sa.Column("write_from", sa.String(2000), unique=True, nullable=False),
        sa.Column("write_to", sa.String(2000), nullable=False),
        _created_at_column(),
    )

    # 7. Permission seed 데이터 삽입
    conn = op.get_bind()
    for code, resource, action, description in PERMISSION_DEFINITIONS:
        conn.execute(
            sa.text(
                "INSERT INTO permissions (code, resource, action, description) "
                "VALUES (:code, :resource, :action, :description)"
            ),
            {"code": code, "resource": resource, "action": action, "description": description},
        )


def downgrade() -> None:
    op.drop_table("rewrite_rules")
    op.drop_table("page_tags")
    op.drop_table("tags")
    op.drop_table("page_versions")
    op.drop_index("idx_pages_directory_path", table_name="pages")
    op.drop_table("pages")
    op.drop_index("idx_page_directory_access_rules_directory_id", table_name="page_directory_access_rules")
    op.drop_table("page_directory_access_rules")
    op.drop_index("uq_page_directory_root", table_name="page_directories")
    op.drop_table("page_directories")
    op.drop_table("page_templates")
    op.drop_index("ix_authorized_tasks_user_type", table_name="authorized_tasks")
    op.drop_table("authorized_tasks")
    op.drop_index("ix_failed_auth_ip_date", table_name="failed_authentication_attempts")
    op.drop_index("ix_failed_auth_area_username_date", table_name="failed_authentication_attempts")
    op.drop_table("failed_authentication_attempts")
    op.drop_table("refresh_tokens")
    op.drop_index("idx_role_permissions_role_id", table_name="role_permissions")
    op.drop_table("role_permissions")
    op.drop_index("idx_permissions_resource_action", table_name="permissions")
    op.drop_table("permissions")
    op.drop_index("idx_users_role_id", table_name="users")
    op.drop_table("users")
    op.drop_table("roles")
