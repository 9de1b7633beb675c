"""휴가 관련 SQLAlchemy ORM 모델 정의.

Time-off SQLAlchemy ORM model definitions.

Tables:
    - time_off_types: 사업장별 휴가 유형 (Vacation, Sick, Personal + custom)
    - time_off_requests: 휴가 요청 (Requests with approval workflow)
"""

import uuid
from datetime import date, datetime, time, timezone
from sqlalchemy import String, DateTime, Date, Time, Boolean, ForeignKey, UniqueConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 기본 휴가 유형 (이름, 색상) — Default types seeded per business
DEFAULT_TIME_OFF_TYPES: tuple[tuple[str, str], ...] = (
    ("Vacation", "#4CAF50"),
    ("Sick", "#F44336"),
    ("Personal", "#2196F3"),
)
DEFAULT_TYPE_COLOR = "#9E9E9E"


class TimeOffType(Base):
    """휴가 유형 모델 (Time-off category with display color)."""

    __tablename__ = "time_off_types"

    # 유형 고유 식별자 — Type unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 사업장 — Business (tenant) id
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 유형 이름 — Type name, unique per business
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # 표시 색상 — Display color "#RRGGBB"
    color: Mapped[str] = mapped_column(String(7), default=DEFAULT_TYPE_COLOR, nullable=False)
    # 기본 유형 여부 — Seeded default
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 활성 여부 — Active flag
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("business_id", "name", name="uq_time_off_type_business_name"),
    )


class TimeOffRequest(Base):
    """휴가 요청 모델 — Pending에서 한 번만 전이.

    Time-off request. Leaves Pending exactly once: to Approved, Denied or
    Cancelled. Approve/deny stamp the approver and timestamp.

    Attributes:
        start_date / end_date: 기간, 포함 (Inclusive date range)
        is_all_day: 종일 여부 (All-day flag)
        start_time / end_time: 부분 휴가 시각 (Times for partial-day requests)
        status: 상태 (Pending/Approved/Denied/Cancelled)
        approved_by_staff_id: 승인/반려자 FK (Approver staff member)
        approved_at: 승인/반려 일시 (Decision timestamp)
        approval_notes: 승인/반려 메모 (Decision notes)
    """

    __tablename__ = "time_off_requests"

    # 요청 고유 식별자 — Request unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 사업장 — Business (tenant) id
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 직원 FK — Requesting staff member (CASCADE)
    staff_member_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("staff_members.id", ondelete="CASCADE"), nullable=False)
    # 휴가 유형 FK — Time-off type (RESTRICT: 사용 중 유형 삭제 불가)
    time_off_type_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("time_off_types.id", ondelete="RESTRICT"), nullable=False)
    # 시작일 — Start date (inclusive)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    # 종료일 — End date (inclusive)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    # 종일 여부 — All-day flag
    is_all_day: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 부분 휴가 시작 시각 — Partial-day start time
    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    # 부분 휴가 종료 시각 — Partial-day end time
    end_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    # 상태 — "Pending" → "Approved" | "Denied" | "Cancelled"
    status: Mapped[str] = mapped_column(String(20), default="Pending", nullable=False)
    # 요청 메모 — Request notes
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    # 승인 메모 — Approval/denial notes
    approval_notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    # 승인/반려자 FK — Approver (SET NULL)
    approved_by_staff_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("staff_members.id", ondelete="SET NULL"), nullable=True)
    # 승인/반려 일시 — Decision timestamp (UTC)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_time_off_business_staff_status", "business_id", "staff_member_id", "status"),
        Index("ix_time_off_business_dates", "business_id", "start_date", "end_date"),
    )
