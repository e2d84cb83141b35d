"""페이지 템플릿 모델.

Page template model. Templates are referenced by page versions; an
archived template can no longer be selected for new content and any
page version still using it is excluded from rendering.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class PageTemplate(Base):
    """페이지 템플릿 테이블.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 템플릿 이름 (Template name, unique)
        file_path: 뷰 파일 경로 (Path of the view file used to render pages)
        description: 설명 (Optional description)
        is_archived: 보관 여부 (Archived templates are hidden from rendering)
        created_at: 생성 일시 UTC
        updated_at: 수정 일시 UTC
    """

    __tablename__ = "page_templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    file_path: Mapped[str] = mapped_column(String(400), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    page_versions = relationship("PageVersion", back_populates="page_template")
