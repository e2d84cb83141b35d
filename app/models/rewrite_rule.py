"""리라이트 규칙 모델 — 찾을 수 없는 경로의 리디렉션.

Rewrite rule model. When a requested page path cannot be resolved, a
rule whose write_from matches the path redirects the client to write_to.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class RewriteRule(Base):
    """리라이트 규칙 테이블.

    Attributes:
        id: 고유 식별자 UUID
        write_from: 원본 경로 (Normalised source path, unique)
        write_to: 대상 경로 또는 URL (Redirect target)
        created_at: 생성 일시 UTC
    """

    __tablename__ = "rewrite_rules"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    write_from: Mapped[str] = mapped_column(String(2000), unique=True, nullable=False)
    write_to: Mapped[str] = mapped_column(String(2000), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
