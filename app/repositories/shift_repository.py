"""근무 레포지토리 — 근무 조회, 충돌 검사용 조회, 직원 단위 잠금.

Shift Repository — Range queries, conflict-check lookups and the
per-staff-member advisory lock that serializes check-then-insert.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.schedule import Shift
from app.repositories.base import BaseRepository


def advisory_lock_key(staff_member_id: UUID) -> int:
    """UUID를 pg_advisory_xact_lock용 64비트 양수 키로 변환합니다.

    Fold a UUID into a positive signed 64-bit key for pg_advisory_xact_lock.
    """
    return staff_member_id.int & 0x7FFF_FFFF_FFFF_FFFF


class ShiftRepository(BaseRepository[Shift]):
    """근무 레포지토리.

    Shift repository with range listing and conflict-check helpers.

    Extends:
        BaseRepository[Shift]
    """

    def __init__(self) -> None:
        super().__init__(Shift)

    async def get_in_range(
        self,
        db: AsyncSession,
        business_id: UUID,
        start_date: date,
        end_date: date,
        staff_member_id: UUID | None = None,
        location_id: UUID | None = None,
        status: str | None = None,
    ) -> Sequence[Shift]:
        """기간 내 근무를 날짜, 시작 시각 순으로 조회합니다.

        List shifts in [start_date, end_date] ordered by date then start time.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            business_id: 사업장 UUID (Business UUID)
            start_date: 시작일, 포함 (Range start, inclusive)
            end_date: 종료일, 포함 (Range end, inclusive)
            staff_member_id: 직원 필터 (Optional staff filter)
            location_id: 매장 필터 (Optional location filter)
            status: 상태 필터 (Optional status filter)

        Returns:
            Sequence[Shift]: 근무 목록 (Shifts in range)
        """
        query: Select = self._with_active_staff(select(Shift)).where(
            Shift.business_id == business_id,
            Shift.date >= start_date,
            Shift.date <= end_date,
        )
        if staff_member_id is not None:
            query = query.where(Shift.staff_member_id == staff_member_id)
        if location_id is not None:
            query = query.where(Shift.location_id == location_id)
        if status is not None:
            query = query.where(Shift.status == status)

        query = query.order_by(Shift.date, Shift.start_time)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_at_location(
        self,
        db: AsyncSession,
        business_id: UUID,
        location_id: UUID,
        work_date: date,
    ) -> Sequence[Shift]:
        """특정 매장, 날짜의 모든 직원 근무 (All staff shifts at a location on a date)."""
        result = await db.execute(
            self._with_active_staff(select(Shift)).where(
                Shift.business_id == business_id,
                Shift.location_id == location_id,
                Shift.date == work_date,
            )
        )
        return result.scalars().all()

    async def get_for_patterns(
        self,
        db: AsyncSession,
        pattern_ids: list[UUID],
        start_date: date,
        end_date: date,
    ) -> Sequence[Shift]:
        """패턴에 연결된 근무 — 필터와 무관하게 발생 억제에 사용.

        Shifts linked to the given patterns in range, used to suppress
        occurrences even when list filters would hide the shift itself.
        """
        if not pattern_ids:
            return []
        result = await db.execute(
            self._with_active_staff(select(Shift)).where(
                Shift.pattern_id.in_(pattern_ids),
                Shift.date >= start_date,
                Shift.date <= end_date,
            )
        )
        return result.scalars().all()

    async def count_for_pattern_on(
        self,
        db: AsyncSession,
        pattern_id: UUID,
        work_date: date,
        exclude_id: UUID | None = None,
    ) -> int:
        query: Select = select(func.count()).select_from(Shift).where(
            Shift.pattern_id == pattern_id,
            Shift.date == work_date,
        )
        if exclude_id is not None:
            query = query.where(Shift.id != exclude_id)
        return (await db.execute(query)).scalar() or 0

    async def unlink_pattern(self, db: AsyncSession, pattern_id: UUID) -> None:
        """패턴 삭제 전 연결 해제 (Detach shifts from a pattern about to be deleted)."""
        await db.execute(update(Shift).where(Shift.pattern_id == pattern_id).values(pattern_id=None))

    async def lock_staff_member(self, db: AsyncSession, staff_member_id: UUID) -> None:
        """직원 단위 트랜잭션 잠금 — 충돌 검사부터 삽입까지 유지.

        Take a transaction-scoped advisory lock for the staff member so that
        concurrent creates for the same person run check-then-insert one at a
        time. Released on commit or rollback. No-op outside PostgreSQL.
        """
        if db.get_bind().dialect.name != "postgresql":
            return
        await db.execute(
            text("SELECT pg_advisory_xact_lock(:key)"),
            {"key": advisory_lock_key(staff_member_id)},
        )


# 싱글턴 인스턴스 — Singleton instance
shift_repository: ShiftRepository = ShiftRepository()
