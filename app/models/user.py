"""사용자 및 역할 관련 SQLAlchemy ORM 모델 정의.

User and Role SQLAlchemy ORM model definitions.
Users and roles are partitioned by user area (e.g. "CMS" for the admin
area, "MBR" for site members). Usernames and role titles are unique
within an area, not globally.

Tables:
    - roles: 사용자 영역 내 역할 (Roles within a user area)
    - users: 사용자 계정 (User accounts with credentials and verification state)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Role(Base):
    """역할 모델 — 사용자 영역 내 권한 묶음.

    Role model — A named set of permissions within a user area.
    Permissions are attached through the role_permissions table.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_area_code: 소속 사용자 영역 코드 (User area code, 3 chars)
        title: 역할 이름 (Role title, unique per area)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Relationships:
        users: 이 역할을 가진 사용자 목록 (Users assigned to this role)
        role_permissions: 역할-권한 매핑 (Permission assignments)

    Constraints:
        uq_role_area_title: 영역 내 역할 이름 고유 (Unique role title per area)
    """

    __tablename__ = "roles"

    # 역할 고유 식별자 — Role unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 사용자 영역 코드 — User area the role belongs to
    user_area_code: Mapped[str] = mapped_column(String(3), nullable=False)
    # 역할 이름 — Role display title (e.g. "Administrator", "Member")
    title: Mapped[str] = mapped_column(String(50), nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_area_code", "title", name="uq_role_area_title"),
    )

    # 관계 — Relationships
    users = relationship("User", back_populates="role")
    role_permissions = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")


class User(Base):
    """사용자 모델 — 시스템 사용자 계정 정보.

    User model — System user account information.
    Each user belongs to exactly one user area and has one role from that area.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_area_code: 사용자 영역 코드 (User area code)
        role_id: 역할 FK (Assigned role foreign key)
        username: 로그인 아이디 (Login username, unique per area, stored lower-cased)
        email: 이메일 (Email address, optional)
        display_name: 표시 이름 (Display name, optional)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        require_password_change: 다음 로그인 전 비밀번호 변경 필요 (Must change password before signing in)
        is_account_verified: 계정 인증 여부 (Whether the account has been verified)
        is_active: 활성 상태 (Active status)
        last_sign_in_at: 마지막 로그인 일시 (Last successful sign-in)
        last_password_change_at: 마지막 비밀번호 변경 일시 (Last password change)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Relationships:
        role: 사용자 역할 (Assigned role)
        refresh_tokens: 리프레시 토큰 목록 (Active refresh tokens, cascade delete)
        authorized_tasks: 계정 복구/인증 작업 (Recovery/verification tasks, cascade delete)

    Constraints:
        uq_user_area_username: 영역 내 사용자명 고유 (Unique username per area)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 사용자 영역 코드 — User area the account signs in to
    user_area_code: Mapped[str] = mapped_column(String(3), nullable=False)
    # 역할 FK — Assigned role (역할 삭제 시 제한됨, role deletion is restricted)
    role_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("roles.id"), nullable=False)
    # 로그인 아이디 — Login username (영역 내 고유, unique within area)
    username: Mapped[str] = mapped_column(String(150), nullable=False)
    # 이메일 — Email address (optional, used for recovery/verification mails)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 표시 이름 — Display name
    display_name: Mapped[str | None] = mapped_column(String(150), nullable=True)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 비밀번호 변경 필요 — Sign-in is blocked until the password is changed
    require_password_change: Mapped[bool] = mapped_column(Boolean, default=False)
    # 계정 인증 여부 — Whether the account has been verified (e.g. via email link)
    is_account_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    # 활성 상태 — Whether the user account is active
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 마지막 로그인 — Last successful sign-in (UTC)
    last_sign_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 마지막 비밀번호 변경 — Last password change (UTC)
    last_password_change_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_area_code", "username", name="uq_user_area_username"),
    )

    # 관계 — Relationships
    role = relationship("Role", back_populates="users")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")
    authorized_tasks = relationship("AuthorizedTask", back_populates="user", cascade="all, delete-orphan")
