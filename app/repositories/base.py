"""공통 레포지토리 — 모든 CMS 레포지토리의 부모 클래스.

Shared repository — parent of the CMS repositories. Every table here is
keyed by a UUID ``id`` column, so lookups by id, id batches, column
filters and the add/remove helpers live in one generic class; domain
repositories add their own ``select()`` statements on top.

Usage:
    class RewriteRuleRepository(BaseRepository[RewriteRule]):
        def __init__(self) -> None:
            super().__init__(RewriteRule)
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

# UUID 키를 가진 ORM 모델 — ORM model with a UUID primary key
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """UUID 키 모델에 대한 공통 쿼리.

    Attributes:
        model: 대상 ORM 모델 클래스 (ORM model class handled by this repository)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    def _filtered(self, query: Select, filters: dict[str, Any] | None) -> Select:
        """{'컬럼명': 값} 조건을 쿼리에 추가합니다 (None 값과 모르는 컬럼은 무시)."""
        for column_name, value in (filters or {}).items():
            if value is not None and hasattr(self.model, column_name):
                query = query.where(getattr(self.model, column_name) == value)
        return query

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
    ) -> ModelType | None:
        """ID로 한 행을 조회합니다.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 행 UUID (Row id)

        Returns:
            ModelType | None: 조회된 행, 없으면 None (Row or None)
        """
        result = await db.execute(select(self.model).where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def get_by_ids(
        self,
        db: AsyncSession,
        record_ids: list[UUID],
    ) -> dict[UUID, ModelType]:
        """ID 목록을 한 번에 조회해 ID→행 딕셔너리로 반환합니다.

        Ids with no row are simply absent from the result.
        """
        if not record_ids:
            return {}
        result = await db.execute(select(self.model).where(self.model.id.in_(set(record_ids))))
        return {row.id: row for row in result.scalars().all()}

    async def get_all(
        self,
        db: AsyncSession,
        filters: dict[str, Any] | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelType]:
        """조건에 맞는 행 전체를 조회합니다.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            filters: 컬럼 동등 조건 (Column equality filters)
            order_by: 정렬 컬럼 (Ordering column)

        Returns:
            Sequence[ModelType]: 조회된 행 (Matching rows)
        """
        query: Select = self._filtered(select(self.model), filters)
        if order_by is not None:
            query = query.order_by(order_by)
        result = await db.execute(query)
        return result.scalars().all()

    async def exists(
        self,
        db: AsyncSession,
        filters: dict[str, Any],
    ) -> bool:
        """조건에 맞는 행이 있는지 확인합니다 (Whether any row matches the filters)."""
        query: Select = self._filtered(select(func.count()).select_from(self.model), filters)
        return ((await db.execute(query)).scalar() or 0) > 0

    async def create(
        self,
        db: AsyncSession,
        values: dict[str, Any],
    ) -> ModelType:
        """새 행을 추가하고 flush 후 새로 읽은 행을 반환합니다.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            values: 컬럼 값 (Column values of the new row)

        Returns:
            ModelType: 추가된 행, 서버 기본값 반영 (The new row with server defaults loaded)
        """
        row: ModelType = self.model(**values)
        db.add(row)
        await db.flush()
        await db.refresh(row)
        return row

    async def update(
        self,
        db: AsyncSession,
        record_id: UUID,
        values: dict[str, Any],
    ) -> ModelType | None:
        """ID로 찾은 행의 컬럼을 갱신합니다.

        Returns:
            ModelType | None: 갱신된 행, 없으면 None (Updated row or None)
        """
        row: ModelType | None = await self.get_by_id(db, record_id)
        if row is None:
            return None
        for column_name, value in values.items():
            if hasattr(row, column_name):
                setattr(row, column_name, value)
        await db.flush()
        return row

    async def delete(
        self,
        db: AsyncSession,
        record_id: UUID,
    ) -> bool:
        """ID로 찾은 행을 삭제합니다 (False when no row has that id)."""
        row: ModelType | None = await self.get_by_id(db, record_id)
        if row is None:
            return False
        await db.delete(row)
        await db.flush()
        return True
