"""역할 레포지토리 — 역할 CRUD 및 중복 검사 쿼리.

Role Repository — CRUD and duplicate-check queries for roles.
Extends BaseRepository with Role-specific database operations.
"""

from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.role import Role
from app.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """역할 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the roles table.
    Provides business-scoped role retrieval and duplicate checking.
    """

    def __init__(self) -> None:
        super().__init__(Role)

    async def get_by_business(
        self,
        db: AsyncSession,
        business_id: UUID,
    ) -> list[Role]:
        """사업장의 역할을 기본 역할 우선, 이름 순으로 조회합니다.

        Retrieve all roles of a business, default roles first, then by name.
        """
        query: Select = (
            select(Role)
            .where(Role.business_id == business_id)
            .order_by(Role.is_default.desc(), Role.name)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_default_names(
        self,
        db: AsyncSession,
        business_id: UUID,
    ) -> set[str]:
        """이미 생성된 기본 역할 이름 (소문자) (Lower-cased names of existing defaults)."""
        result = await db.execute(
            select(Role.name).where(Role.business_id == business_id, Role.is_default.is_(True))
        )
        return {name.lower() for name in result.scalars().all()}

    async def name_exists(
        self,
        db: AsyncSession,
        business_id: UUID,
        name: str,
        exclude_id: UUID | None = None,
    ) -> bool:
        """사업장 내 역할 이름 중복 여부, 대소문자 무시.

        Whether a role name is already used in the business (case-insensitive).
        """
        query: Select = (
            select(func.count())
            .select_from(Role)
            .where(Role.business_id == business_id, func.lower(Role.name) == name.lower())
        )
        if exclude_id is not None:
            query = query.where(Role.id != exclude_id)
        count: int = (await db.execute(query)).scalar() or 0
        return count > 0


# 싱글턴 인스턴스 — Singleton instance
role_repository: RoleRepository = RoleRepository()
