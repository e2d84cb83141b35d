"""인증 관련 SQLAlchemy ORM 모델 — 실패한 인증 시도 및 인가 작업.

Authentication-related ORM models.

Tables:
    - failed_authentication_attempts: 실패한 로그인 기록 (Used for attempt throttling)
    - authorized_tasks: 토큰 기반 일회성 작업 (Single-use token tasks such as
      account recovery and account verification)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

# 인가 작업 유형 코드 — Authorized task type codes
ACCOUNT_RECOVERY_TASK_TYPE: str = "account-recovery"
ACCOUNT_VERIFICATION_TASK_TYPE: str = "account-verification"


class FailedAuthenticationAttempt(Base):
    """실패한 인증 시도 모델.

    One row per failed credential check. Rows are counted per IP address
    and per username inside a sliding window to throttle brute force
    attempts.

    Attributes:
        id: 고유 식별자 UUID
        user_area_code: 인증 대상 사용자 영역 (User area being signed in to)
        username: 시도한 사용자명 (Username tried, lower-cased)
        ip_address: 요청 IP (Client IP address, optional)
        attempt_date: 시도 일시 UTC (Attempt timestamp)
    """

    __tablename__ = "failed_authentication_attempts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_area_code: Mapped[str] = mapped_column(String(3), nullable=False)
    username: Mapped[str] = mapped_column(String(150), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    attempt_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    __table_args__ = (
        Index("ix_failed_auth_area_username_date", "user_area_code", "username", "attempt_date"),
        Index("ix_failed_auth_ip_date", "ip_address", "attempt_date"),
    )


class AuthorizedTask(Base):
    """인가 작업 모델 — 이메일 링크로 완료하는 일회성 작업.

    Authorized task model. A task is usable while it is neither completed,
    invalidated nor expired.

    Attributes:
        id: 고유 식별자 UUID
        user_id: 대상 사용자 FK (Target user)
        task_type: 작업 유형 코드 (e.g. "account-recovery")
        token: 일회성 토큰 (Random single-use token)
        expires_at: 만료 일시 (Expiry timestamp)
        created_at: 생성 일시
        completed_at: 완료 일시 (Set when the task is used)
        invalidated_at: 무효화 일시 (Set when superseded or cancelled)
    """

    __tablename__ = "authorized_tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    task_type: Mapped[str] = mapped_column(String(50), nullable=False)
    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    invalidated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_authorized_tasks_user_type", "user_id", "task_type"),
    )

    user = relationship("User", back_populates="authorized_tasks")
