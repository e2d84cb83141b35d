"""Permission 레포지토리 — 권한 조회 쿼리.

Permission Repository — queries for permission lookups.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.permission import PERMISSION_DEFINITIONS, Permission, RolePermission


class PermissionRepository:
    """permissions / role_permissions 테이블 쿼리."""

    async def get_permissions_by_role_id(self, db: AsyncSession, role_id: UUID) -> set[str]:
        """role_id에 해당하는 permission code set 반환."""
        result = await db.execute(
            select(Permission.code)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
        )
        return {row[0] for row in result.all()}

    async def get_by_codes(self, db: AsyncSession, codes: list[str]) -> list[Permission]:
        """code 목록으로 permission 조회 (존재하지 않는 code는 결과에서 빠짐)."""
        if not codes:
            return []
        result = await db.execute(select(Permission).where(Permission.code.in_(codes)))
        return list(result.scalars().all())

    async def get_all_permissions(self, db: AsyncSession) -> list[Permission]:
        """전체 permission 목록 (resource, action 순 정렬)."""
        result = await db.execute(
            select(Permission).order_by(Permission.resource, Permission.action)
        )
        return list(result.scalars().all())

    async def set_role_permissions(
        self, db: AsyncSession, role_id: UUID, permission_ids: list[UUID]
    ) -> None:
        """역할의 permission을 일괄 교체 (기존 삭제 → 새로 삽입)."""
        # 기존 삭제
        existing = await db.execute(
            select(RolePermission).where(RolePermission.role_id == role_id)
        )
        for rp in existing.scalars().all():
            await db.delete(rp)
        await db.flush()

        # 새로 삽입
        for perm_id in permission_ids:
            db.add(RolePermission(role_id=role_id, permission_id=perm_id))
        await db.flush()

    async def ensure_defined_permissions(self, db: AsyncSession) -> list[Permission]:
        """PERMISSION_DEFINITIONS 중 없는 permission을 생성하고 전체 목록 반환."""
        existing: dict[str, Permission] = {p.code: p for p in await self.get_all_permissions(db)}
        for code, resource, action, description in PERMISSION_DEFINITIONS:
            if code not in existing:
                permission = Permission(code=code, resource=resource, action=action, description=description)
                db.add(permission)
                existing[code] = permission
        await db.flush()
        return list(existing.values())


# 싱글턴 인스턴스
permission_repository: PermissionRepository = PermissionRepository()
