"""리라이트 규칙 서비스.

Rewrite Rule Service — manages redirects for paths that no longer
resolve to a page.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.cqs.base import ExecutionContext
from app.models.rewrite_rule import RewriteRule
from app.repositories.rewrite_rule_repository import rewrite_rule_repository
from app.schemas.rewrite_rule import (
    AddRewriteRuleCommand,
    DeleteRewriteRuleCommand,
    GetAllRewriteRulesQuery,
    GetRewriteRuleByPathQuery,
    RewriteRuleResponse,
)
from app.utils.exceptions import DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


def normalize_rule_path(path: str) -> str:
    """경로를 "/a/b" 형태로 정규화합니다 (Leading "/", no trailing "/", lower-case)."""
    return "/" + path.strip().strip("/").lower()


class RewriteRuleService:
    """리라이트 규칙 비즈니스 로직 서비스."""

    def _to_response(self, rule: RewriteRule) -> RewriteRuleResponse:
        return RewriteRuleResponse(
            id=str(rule.id),
            write_from=rule.write_from,
            write_to=rule.write_to,
            created_at=rule.created_at,
        )

    async def get_all(
        self,
        db: AsyncSession,
        query: GetAllRewriteRulesQuery,
        context: ExecutionContext,
    ) -> list[RewriteRuleResponse]:
        return [self._to_response(r) for r in await rewrite_rule_repository.get_list(db)]

    async def get_by_path(
        self,
        db: AsyncSession,
        query: GetRewriteRuleByPathQuery,
        context: ExecutionContext,
    ) -> RewriteRuleResponse | None:
        rule: RewriteRule | None = await rewrite_rule_repository.get_by_write_from(
            db, normalize_rule_path(query.path)
        )
        return self._to_response(rule) if rule else None

    async def add(
        self,
        db: AsyncSession,
        command: AddRewriteRuleCommand,
        context: ExecutionContext,
    ) -> UUID:
        """리라이트 규칙을 추가합니다.

        Raises:
            DuplicateError: 같은 원본 경로의 규칙 존재 (Source path already has a rule)
        """
        write_from: str = normalize_rule_path(command.write_from)
        if await rewrite_rule_repository.exists(db, {"write_from": write_from}):
            raise DuplicateError(f"A rewrite rule for '{write_from}' already exists")

        rule: RewriteRule = await rewrite_rule_repository.create(
            db, {"write_from": write_from, "write_to": command.write_to.strip()}
        )
        logger.info("Rewrite rule %s -> %s added", write_from, rule.write_to)
        return rule.id

    async def delete(
        self,
        db: AsyncSession,
        command: DeleteRewriteRuleCommand,
        context: ExecutionContext,
    ) -> None:
        if not await rewrite_rule_repository.delete(db, command.rewrite_rule_id):
            raise NotFoundError("Rewrite rule not found")


# 싱글턴 인스턴스 — Singleton instance
rewrite_rule_service: RewriteRuleService = RewriteRuleService()
