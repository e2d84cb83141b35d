"""리라이트 규칙 스키마 및 CQS 메시지.

Rewrite rule schemas and commands/queries.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.cqs.base import Command, Query


class RewriteRuleResponse(BaseModel):
    """리라이트 규칙 응답 스키마."""

    id: str
    write_from: str
    write_to: str
    created_at: datetime


class AddRewriteRuleCommand(Command):
    """리라이트 규칙 추가 커맨드. 결과는 생성된 규칙 ID.

    write_from is normalised to a leading "/" without a trailing "/".
    """

    write_from: str = Field(min_length=1, max_length=2000)
    write_to: str = Field(min_length=1, max_length=2000)


class DeleteRewriteRuleCommand(Command):
    rewrite_rule_id: UUID


class GetAllRewriteRulesQuery(Query[list[RewriteRuleResponse]]):
    pass


class GetRewriteRuleByPathQuery(Query[RewriteRuleResponse | None]):
    path: str
