"""태그 레포지토리.

Tag repository — resolves tag texts to Tag rows, creating missing ones.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.page import Tag


class TagRepository:
    """tags 테이블 쿼리."""

    async def get_or_create_many(
        self,
        db: AsyncSession,
        tag_texts: list[str],
    ) -> list[Tag]:
        """태그 텍스트 목록을 Tag 행으로 변환합니다.

        Normalise (trim, lower-case, dedupe) the texts and return matching
        Tag rows, inserting the ones that do not exist yet.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            tag_texts: 태그 텍스트 목록 (Tag texts as entered)

        Returns:
            list[Tag]: 텍스트 순으로 정렬된 태그 (Tags sorted by text)
        """
        normalized: list[str] = sorted({t.strip().lower() for t in tag_texts if t and t.strip()})
        if not normalized:
            return []

        result = await db.execute(select(Tag).where(Tag.tag_text.in_(normalized)))
        existing: dict[str, Tag] = {tag.tag_text: tag for tag in result.scalars().all()}
        for text in normalized:
            if text not in existing:
                tag = Tag(tag_text=text)
                db.add(tag)
                existing[text] = tag
        await db.flush()
        return [existing[text] for text in normalized]


# 싱글턴 인스턴스
tag_repository: TagRepository = TagRepository()
