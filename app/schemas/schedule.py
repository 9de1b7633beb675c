"""스케줄 관련 Pydantic 요청/응답 스키마 정의.

Schedule Pydantic request/response schema definitions.
Covers shifts, conflict checks, recurring patterns, occurrences,
availability slots and the per-business scheduling policy.
Dates are "yyyy-MM-dd" and times are "HH:mm".
"""

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.schedule import SHIFT_STATUSES, SHIFT_TYPES
from app.schemas.common import TimeStr

_STATUS_PATTERN = "^(" + "|".join(SHIFT_STATUSES) + ")$"

# 패턴 시작일 하한 — Earliest accepted pattern_start
EARLIEST_PATTERN_START = dt.date(2000, 1, 1)


def normalize_shift_type(value: str | None) -> str:
    """근무 유형 정규화 — 알 수 없는 값은 Custom (Unknown values become Custom)."""
    if value:
        for known in SHIFT_TYPES:
            if known.lower() == value.strip().lower():
                return known
    return "Custom"


def _check_window(start: str | None, end: str | None) -> None:
    # "HH:mm" 0 패딩 문자열이므로 사전순 비교가 시각 비교와 같음
    if start is not None and end is not None and start >= end:
        raise ValueError("start_time must be before end_time")


# === 근무 (Shift) 스키마 ===

class ShiftCreate(BaseModel):
    """근무 생성 요청 스키마.

    Shift creation request schema.

    Attributes:
        staff_member_id: 직원 UUID (Staff member)
        date: 근무 날짜 (Work date)
        start_time / end_time: "HH:mm", start < end
        shift_type: 근무 유형, 알 수 없으면 Custom (Opening/Mid/Closing/Custom)
        status: 상태 (Default "Scheduled")
        location_id: 매장 UUID (Optional location)
        pattern_id: 대체할 패턴 UUID (Pattern whose occurrence this shift replaces)
        is_override: 패턴 발생 대체 여부 (Override flag)
    """

    staff_member_id: UUID
    date: dt.date
    start_time: TimeStr
    end_time: TimeStr
    shift_type: str = "Custom"
    status: str = Field("Scheduled", pattern=_STATUS_PATTERN)
    location_id: UUID | None = None
    notes: str | None = Field(None, max_length=500)
    pattern_id: UUID | None = None
    is_override: bool = False

    @field_validator("shift_type", mode="before")
    @classmethod
    def _normalize_type(cls, value: str | None) -> str:
        return normalize_shift_type(value)

    @model_validator(mode="after")
    def _validate_window(self) -> "ShiftCreate":
        _check_window(self.start_time, self.end_time)
        return self


class ShiftUpdate(BaseModel):
    """근무 수정 요청 스키마 (부분 업데이트).

    Shift update request schema (partial update). When only one of the times
    is sent the service re-validates the window against the stored value.
    """

    staff_member_id: UUID | None = None
    date: dt.date | None = None
    start_time: TimeStr | None = None
    end_time: TimeStr | None = None
    shift_type: str | None = None
    status: str | None = Field(None, pattern=_STATUS_PATTERN)
    location_id: UUID | None = None
    notes: str | None = Field(None, max_length=500)

    @field_validator("shift_type", mode="before")
    @classmethod
    def _normalize_type(cls, value: str | None) -> str | None:
        return None if value is None else normalize_shift_type(value)

    @model_validator(mode="after")
    def _validate_window(self) -> "ShiftUpdate":
        _check_window(self.start_time, self.end_time)
        return self


class ShiftBulkCreate(BaseModel):
    """근무 일괄 생성 요청 (Bulk creation, all-or-nothing)."""

    shifts: list[ShiftCreate] = Field(..., min_length=1)


class ShiftResponse(BaseModel):
    """근무 응답 스키마 (Shift response)."""

    id: str
    business_id: str
    staff_member_id: str
    staff_member_name: str | None = None
    date: dt.date
    start_time: str
    end_time: str
    shift_type: str
    status: str
    location_id: str | None
    notes: str | None
    pattern_id: str | None
    is_override: bool
    created_at: dt.datetime
    updated_at: dt.datetime


class ShiftConflictResponse(BaseModel):
    """충돌 항목 응답 (type: overlap/overtime/location_conflict, severity: error/warning)."""

    type: str
    message: str
    severity: str


class ConflictCheckRequest(BaseModel):
    """충돌 사전 검사 요청 (Dry-run conflict check)."""

    staff_member_id: UUID
    date: dt.date
    start_time: TimeStr
    end_time: TimeStr
    location_id: UUID | None = None
    exclude_shift_id: UUID | None = None

    @model_validator(mode="after")
    def _validate_window(self) -> "ConflictCheckRequest":
        _check_window(self.start_time, self.end_time)
        return self


class ShiftOccurrenceResponse(BaseModel):
    """근무 발생 응답 — 실제 근무 또는 패턴 발생.

    Occurrence response. shift_id is set for stored shifts; pattern-only
    occurrences carry pattern_id and no shift_id.
    """

    date: dt.date
    start_time: str
    end_time: str
    staff_member_id: str
    location_id: str | None
    shift_type: str
    status: str | None
    is_from_pattern: bool
    pattern_id: str | None
    shift_id: str | None
    notes: str | None


class AvailabilitySlotResponse(BaseModel):
    """가용성(점유) 슬롯 응답.

    Busy slot. type is "shift" or "time-off"; source is "shift", "pattern"
    or "time-off" and source_id the originating record.
    """

    date: dt.date
    start_time: str
    end_time: str
    type: str
    source: str
    source_id: str | None


# === 반복 패턴 (Recurring pattern) 스키마 ===

class RecurringShiftPatternCreate(BaseModel):
    """반복 근무 패턴 생성 요청 — rrule은 저장 전 검증됨.

    Recurring pattern creation request; the rule is parsed before saving.
    """

    staff_member_id: UUID
    location_id: UUID | None = None
    rrule: str = Field(..., min_length=1, max_length=500, examples=["FREQ=WEEKLY;BYDAY=MO,WE,FR"])
    start_time: TimeStr
    end_time: TimeStr
    pattern_start: dt.date = Field(..., ge=EARLIEST_PATTERN_START)
    pattern_end: dt.date | None = None
    shift_type: str = "Custom"
    notes: str | None = Field(None, max_length=500)

    @field_validator("shift_type", mode="before")
    @classmethod
    def _normalize_type(cls, value: str | None) -> str:
        return normalize_shift_type(value)

    @model_validator(mode="after")
    def _validate(self) -> "RecurringShiftPatternCreate":
        _check_window(self.start_time, self.end_time)
        if self.pattern_end is not None and self.pattern_end < self.pattern_start:
            raise ValueError("pattern_end must not be before pattern_start")
        return self


class RecurringShiftPatternUpdate(BaseModel):
    """반복 근무 패턴 수정 요청 (부분 업데이트)."""

    location_id: UUID | None = None
    rrule: str | None = Field(None, min_length=1, max_length=500)
    start_time: TimeStr | None = None
    end_time: TimeStr | None = None
    pattern_start: dt.date | None = Field(None, ge=EARLIEST_PATTERN_START)
    pattern_end: dt.date | None = None
    shift_type: str | None = None
    notes: str | None = Field(None, max_length=500)
    is_active: bool | None = None

    @field_validator("shift_type", mode="before")
    @classmethod
    def _normalize_type(cls, value: str | None) -> str | None:
        return None if value is None else normalize_shift_type(value)

    @model_validator(mode="after")
    def _validate_window(self) -> "RecurringShiftPatternUpdate":
        _check_window(self.start_time, self.end_time)
        return self


class RecurringShiftPatternResponse(BaseModel):
    id: str
    business_id: str
    staff_member_id: str
    staff_member_name: str | None = None
    location_id: str | None
    rrule: str
    start_time: str
    end_time: str
    pattern_start: dt.date
    pattern_end: dt.date | None
    shift_type: str
    notes: str | None
    is_active: bool
    created_at: dt.datetime
    updated_at: dt.datetime


# === 충돌 정책 (Scheduling policy) 스키마 ===

class SchedulingPolicyUpdate(BaseModel):
    """충돌 정책 수정 요청 — None은 해당 검사 비활성.

    Scheduling policy upsert. A None threshold disables that check.
    """

    daily_overtime_hours: float | None = Field(None, gt=0, le=24)
    weekly_overtime_hours: float | None = Field(40.0, gt=0, le=168)
    location_capacity: int | None = Field(None, ge=1)


class SchedulingPolicyResponse(BaseModel):
    """충돌 정책 응답. is_default=True면 저장된 행 없이 환경 설정 기본값.

    Effective policy; is_default means no row is stored and application
    settings apply.
    """

    business_id: str
    daily_overtime_hours: float | None
    weekly_overtime_hours: float | None
    location_capacity: int | None
    is_default: bool
