"""휴가 관련 Pydantic 요청/응답 스키마 정의.

Time-off Pydantic request/response schema definitions.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.schemas.common import TimeStr

_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class TimeOffTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: str | None = Field(None, pattern=_COLOR_PATTERN)  # 없으면 #9E9E9E (Defaults to grey)


class TimeOffTypeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    color: str | None = Field(None, pattern=_COLOR_PATTERN)
    is_active: bool | None = None


class TimeOffTypeResponse(BaseModel):
    id: str
    business_id: str
    name: str
    color: str
    is_default: bool
    is_active: bool


class TimeOffRequestCreate(BaseModel):
    """휴가 요청 생성 스키마.

    Time-off request creation schema.
    ``staff_member_id`` defaults to the caller; requesting for someone else
    needs TimeOff.Manage. Partial-day requests need both times.
    """

    staff_member_id: UUID | None = None
    time_off_type_id: UUID
    start_date: date
    end_date: date
    is_all_day: bool = True
    start_time: TimeStr | None = None
    end_time: TimeStr | None = None
    notes: str | None = Field(None, max_length=1000)

    @model_validator(mode="after")
    def _validate(self) -> "TimeOffRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if not self.is_all_day:
            if self.start_time is None or self.end_time is None:
                raise ValueError("start_time and end_time are required for partial-day requests")
            if self.start_time >= self.end_time:
                raise ValueError("start_time must be before end_time")
        return self


class TimeOffDecision(BaseModel):
    """승인/반려 요청 바디 (Approve/deny body)."""

    notes: str | None = Field(None, max_length=1000)


class TimeOffRequestResponse(BaseModel):
    id: str
    business_id: str
    staff_member_id: str
    staff_member_name: str | None = None
    time_off_type_id: str
    time_off_type_name: str | None = None
    start_date: date
    end_date: date
    is_all_day: bool
    start_time: str | None
    end_time: str | None
    status: str
    notes: str | None
    approval_notes: str | None
    approved_by_staff_id: str | None
    approved_by_name: str | None = None
    approved_at: datetime | None
    created_at: datetime
    updated_at: datetime
