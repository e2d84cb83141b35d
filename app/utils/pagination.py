"""페이지네이션 유틸리티.

Paged listings for the admin API (users, pages). A search builds a
``Select``; ``paginate`` runs it for one page and counts the whole set,
and the service maps the rows into a ``PagedResult`` of response models.
"""

import math
from typing import Any, Generic, Sequence, TypeVar

from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class PagedResult(BaseModel, Generic[T]):
    """한 페이지 분량의 결과와 페이지 정보.

    Attributes:
        items: 현재 페이지 항목 (Items on this page)
        total: 전체 항목 수 (Items across all pages)
        page: 현재 페이지, 1부터 (Current page, 1-based)
        per_page: 페이지 크기 (Page size)
        pages: 전체 페이지 수 (Page count)
    """

    items: list[T]
    total: int
    page: int
    per_page: int
    pages: int

    @classmethod
    def build(cls, items: list[T], total: int, page: int, per_page: int) -> "PagedResult[T]":
        pages: int = math.ceil(total / per_page) if per_page > 0 else 0
        return cls(items=items, total=total, page=page, per_page=per_page, pages=pages)


async def paginate(
    db: AsyncSession,
    query: Select[Any],
    page: int = 1,
    per_page: int = 20,
) -> tuple[Sequence[Any], int]:
    """쿼리의 한 페이지와 전체 개수를 반환합니다.

    Args:
        db: 비동기 데이터베이스 세션 (Async database session)
        query: 정렬까지 적용된 검색 쿼리 (Ordered search query)
        page: 페이지 번호, 1부터 (1-based page number)
        per_page: 페이지 크기 (Page size)

    Returns:
        tuple[Sequence[Any], int]: (현재 페이지 행, 전체 개수) (Rows on the page, total count)
    """
    total: int = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
    result = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
    return result.scalars().all(), total
