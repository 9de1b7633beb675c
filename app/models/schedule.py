"""스케줄 관련 SQLAlchemy ORM 모델 정의.

Schedule-related SQLAlchemy ORM model definitions.
Concrete shifts, recurring shift patterns that expand into occurrences on
read, and the per-business conflict policy.

Tables:
    - shifts: 실제 근무 (Concrete dated shifts)
    - recurring_shift_patterns: 반복 근무 패턴 (RRULE-based patterns)
    - scheduling_policies: 사업장별 충돌 임계값 (Per-business conflict thresholds)
"""

import uuid
from datetime import date, datetime, time, timezone
from sqlalchemy import String, DateTime, Date, Time, Boolean, Float, Integer, ForeignKey, UniqueConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 근무 상태 — Shift status values
SHIFT_STATUSES: tuple[str, ...] = (
    "Pending", "Scheduled", "Confirmed", "Rejected", "Completed", "Cancelled", "NoShow",
)

# 근무 유형 — Shift type values; 알 수 없는 값은 Custom (unknown values map to Custom)
SHIFT_TYPES: tuple[str, ...] = ("Opening", "Mid", "Closing", "Custom")


class Shift(Base):
    """근무 모델 — 특정 날짜의 직원 근무.

    Shift model — A staff member's work window on one date.
    A shift created for a pattern occurrence carries pattern_id; with
    is_override=True it replaces that occurrence (e.g. moved hours).

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        business_id: 소속 사업장 ID (Tenant partition key)
        staff_member_id: 직원 FK (Staff member working the shift)
        date: 근무 날짜 (Work date)
        start_time / end_time: 시작/종료 시각, start < end (Wall-clock window)
        shift_type: 근무 유형 (Opening/Mid/Closing/Custom)
        status: 상태 (Pending/Scheduled/Confirmed/Rejected/Completed/Cancelled/NoShow)
        location_id: 매장 ID, 선택 (Location id, optional)
        pattern_id: 원본 패턴 FK, 선택 (Pattern this shift was materialized from)
        is_override: 패턴 발생 대체 여부 (Overrides the pattern occurrence)
    """

    __tablename__ = "shifts"

    # 근무 고유 식별자 — Shift unique identifier (UUID v4)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 사업장 — Business (tenant) id
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 직원 FK — Staff member (CASCADE: 직원 삭제 시 근무도 삭제)
    staff_member_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("staff_members.id", ondelete="CASCADE"), nullable=False)
    # 근무 날짜 — Work date
    date: Mapped[date] = mapped_column(Date, nullable=False)
    # 시작 시각 — Start time
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    # 종료 시각 — End time
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    # 근무 유형 — "Opening" / "Mid" / "Closing" / "Custom"
    shift_type: Mapped[str] = mapped_column(String(20), default="Custom", nullable=False)
    # 상태 — Status (default "Scheduled")
    status: Mapped[str] = mapped_column(String(20), default="Scheduled", nullable=False)
    # 매장 ID — Location id (external, optional)
    location_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    # 메모 — Optional notes
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 원본 패턴 FK — Source pattern (SET NULL: 패턴 삭제 시 연결 해제)
    pattern_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("recurring_shift_patterns.id", ondelete="SET NULL"), nullable=True)
    # 패턴 발생 대체 여부 — Overrides the pattern occurrence on this date
    is_override: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_shifts_business_date", "business_id", "date"),
        Index("ix_shifts_staff_date", "staff_member_id", "date"),
        Index("ix_shifts_location_date", "location_id", "date"),
    )


class RecurringShiftPattern(Base):
    """반복 근무 패턴 모델 — RRULE로 발생을 정의.

    Recurring shift pattern — Defines occurrences with an RRULE. Occurrences
    are computed on read and never stored.

    Attributes:
        rrule: 반복 규칙 문자열 (Recurrence rule, e.g. "FREQ=WEEKLY;BYDAY=MO,WE,FR")
        pattern_start: 시리즈 시작일 (First day of the series)
        pattern_end: 시리즈 종료일, 없으면 무기한 (Last day, open-ended if None)
        is_active: 활성 여부 — 비활성 패턴은 발생 없음 (Inactive patterns produce nothing)
    """

    __tablename__ = "recurring_shift_patterns"

    # 패턴 고유 식별자 — Pattern unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 사업장 — Business (tenant) id
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 직원 FK — Staff member (CASCADE)
    staff_member_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("staff_members.id", ondelete="CASCADE"), nullable=False)
    # 매장 ID — Location id (external, optional)
    location_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    # 반복 규칙 — RRULE text
    rrule: Mapped[str] = mapped_column(String(500), nullable=False)
    # 시작 시각 — Start time of each occurrence
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    # 종료 시각 — End time of each occurrence
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    # 시리즈 시작일 — Series start date
    pattern_start: Mapped[date] = mapped_column(Date, nullable=False)
    # 시리즈 종료일 — Series end date (optional)
    pattern_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    # 근무 유형 — Shift type for occurrences
    shift_type: Mapped[str] = mapped_column(String(20), default="Custom", nullable=False)
    # 메모 — Optional notes
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 활성 여부 — Active flag
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_patterns_business_staff", "business_id", "staff_member_id"),
        Index("ix_patterns_business_location", "business_id", "location_id"),
    )


class SchedulingPolicy(Base):
    """사업장별 충돌 임계값 — 없으면 환경 설정 기본값 사용.

    Per-business conflict thresholds. Missing row means application defaults.
    A None threshold disables that check.
    """

    __tablename__ = "scheduling_policies"

    # 정책 고유 식별자 — Policy unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 사업장 — Business (tenant) id, one row per business
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 일일 초과근무 기준 시간 — Daily overtime threshold (hours)
    daily_overtime_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    # 주간 초과근무 기준 시간 — Weekly overtime threshold (hours, Sunday-start week)
    weekly_overtime_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    # 매장 동시 근무 인원 한도 — Location capacity (other staff overlapping)
    location_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("business_id", name="uq_scheduling_policy_business"),
    )
