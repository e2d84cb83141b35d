"""인가 작업 레포지토리 — 계정 복구/인증 토큰 작업 조회.

Authorized task repository — token based single-use tasks.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.authentication import AuthorizedTask
from app.repositories.base import BaseRepository


class AuthorizedTaskRepository(BaseRepository[AuthorizedTask]):
    """authorized_tasks 테이블 쿼리."""

    def __init__(self) -> None:
        super().__init__(AuthorizedTask)

    async def get_by_token(
        self,
        db: AsyncSession,
        token: str,
    ) -> AuthorizedTask | None:
        """토큰으로 작업을 사용자와 함께 조회합니다.

        Retrieve a task by token with its user loaded. Completed,
        invalidated and expired tasks are returned too; callers decide
        how to reject them.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            token: 작업 토큰 (Task token)

        Returns:
            AuthorizedTask | None: 조회된 작업 또는 None (Found task or None)
        """
        result = await db.execute(
            select(AuthorizedTask)
            .options(selectinload(AuthorizedTask.user))
            .where(AuthorizedTask.token == token)
        )
        return result.scalar_one_or_none()

    async def invalidate_open_tasks(
        self,
        db: AsyncSession,
        user_id: UUID,
        task_type: str,
        invalidated_at: datetime,
        exclude_task_id: UUID | None = None,
    ) -> int:
        """사용자의 열린 작업(미완료, 미무효)을 무효화합니다.

        Mark every open task of the given type as invalidated.

        Returns:
            int: 무효화된 작업 수 (Number of invalidated tasks)
        """
        stmt = (
            update(AuthorizedTask)
            .where(
                AuthorizedTask.user_id == user_id,
                AuthorizedTask.task_type == task_type,
                AuthorizedTask.completed_at.is_(None),
                AuthorizedTask.invalidated_at.is_(None),
            )
            .values(invalidated_at=invalidated_at)
        )
        if exclude_task_id is not None:
            stmt = stmt.where(AuthorizedTask.id != exclude_task_id)
        result = await db.execute(stmt)
        await db.flush()
        return result.rowcount or 0

    async def get_open_by_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        task_type: str,
    ) -> list[AuthorizedTask]:
        """사용자의 열린 작업 목록."""
        result = await db.execute(
            select(AuthorizedTask).where(
                AuthorizedTask.user_id == user_id,
                AuthorizedTask.task_type == task_type,
                AuthorizedTask.completed_at.is_(None),
                AuthorizedTask.invalidated_at.is_(None),
            )
        )
        return list(result.scalars().all())


# 싱글턴 인스턴스
authorized_task_repository: AuthorizedTaskRepository = AuthorizedTaskRepository()
