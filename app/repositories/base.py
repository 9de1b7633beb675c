"""기본 레포지토리 — 모든 레포지토리의 부모 클래스.

Base Repository — Parent class for all domain repositories.
Every top-level entity carries business_id, the tenant partition key; reads
given a business_id only see that tenant's rows, so records of another
business behave as missing.

Usage:
    class RoleRepository(BaseRepository[Role]):
        def __init__(self) -> None:
            super().__init__(Role)
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base
from app.models.staff import StaffMember

# 제네릭 타입 변수 — SQLAlchemy 모델을 나타냄
# Generic type variable representing a SQLAlchemy model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """사업장 범위 제네릭 레포지토리.

    Generic tenant-scoped repository: lookup by id, paginated listing and
    creation. Writes only flush; committing is left to the router.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    def _with_active_staff(self, query: Select) -> Select:
        """소프트 삭제된 직원 소유 행 제외.

        Inner-join the owning staff member so rows of soft-deleted staff
        (shifts, patterns, time-off requests) drop out with their owner.
        """
        if hasattr(self.model, "staff_member_id"):
            query = query.join(
                StaffMember,
                and_(StaffMember.id == self.model.staff_member_id, StaffMember.is_deleted.is_(False)),
            )
        return query

    def _scoped(self, query: Select, business_id: UUID | None) -> Select:
        # 자식 테이블(staff_locations 등)은 business_id가 없음 — Child tables have no business_id
        if business_id is not None and hasattr(self.model, "business_id"):
            query = query.where(self.model.business_id == business_id)
        return query

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
        business_id: UUID | None = None,
    ) -> ModelType | None:
        """ID로 단일 레코드를 조회합니다.

        Retrieve a single record by its UUID, within the business if given.
        Soft-deleted staff members, and rows they own, are never returned.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 레코드 UUID (Record UUID)
            business_id: 사업장 범위, None이면 미적용 (Tenant filter; None skips it)

        Returns:
            ModelType | None: 조회된 레코드 또는 None (Found record or None)
        """
        query: Select = self._with_active_staff(
            self._scoped(select(self.model).where(self.model.id == record_id), business_id)
        )
        return (await db.execute(query)).scalar_one_or_none()

    async def get_paginated(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        """한 페이지와 전체 개수를 반환합니다 (One page of ``query`` plus its total)."""
        total: int = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
        result = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
        return result.scalars().all(), total

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType:
        """새 레코드를 추가하고 flush 후 새로고침합니다.

        Add a record, flush it so defaults and the id are populated, and
        refresh it from the database.
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj
