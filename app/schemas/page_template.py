"""페이지 템플릿 스키마 및 CQS 메시지.

Page template schemas and commands/queries.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.cqs.base import Command, Query


class PageTemplateResponse(BaseModel):
    """페이지 템플릿 응답 스키마.

    Attributes:
        id: 템플릿 UUID
        name: 템플릿 이름
        file_path: 뷰 파일 경로
        description: 설명
        is_archived: 보관 여부
        created_at: 생성 일시
    """

    id: str
    name: str
    file_path: str
    description: str | None = None
    is_archived: bool
    created_at: datetime


class AddPageTemplateCommand(Command):
    """템플릿 추가 커맨드. 결과는 생성된 템플릿 ID."""

    name: str = Field(min_length=1, max_length=100)
    file_path: str = Field(min_length=1, max_length=400)
    description: str | None = None


class ArchivePageTemplateCommand(Command):
    page_template_id: UUID


class UnarchivePageTemplateCommand(Command):
    page_template_id: UUID


class GetAllPageTemplatesQuery(Query[list[PageTemplateResponse]]):
    include_archived: bool = True
