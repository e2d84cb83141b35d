"""리라이트 규칙 레포지토리.

Rewrite rule repository.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.rewrite_rule import RewriteRule
from app.repositories.base import BaseRepository


class RewriteRuleRepository(BaseRepository[RewriteRule]):
    """rewrite_rules 테이블 쿼리."""

    def __init__(self) -> None:
        super().__init__(RewriteRule)

    async def get_by_write_from(
        self,
        db: AsyncSession,
        write_from: str,
    ) -> RewriteRule | None:
        """원본 경로로 규칙 조회 (Find the rule for a normalised source path)."""
        result = await db.execute(select(RewriteRule).where(RewriteRule.write_from == write_from))
        return result.scalar_one_or_none()

    async def get_list(self, db: AsyncSession) -> list[RewriteRule]:
        return list(await self.get_all(db, order_by=RewriteRule.write_from))


# 싱글턴 인스턴스
rewrite_rule_repository: RewriteRuleRepository = RewriteRuleRepository()
