"""직원 관련 Pydantic 요청/응답 스키마 정의.

Staff Pydantic request/response schema definitions.
Covers staff member CRUD, status changes, and location/service assignment.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.models.staff import PERMISSION_LEVELS, STAFF_STATUSES

_LEVEL_PATTERN = "^(" + "|".join(PERMISSION_LEVELS) + ")$"
_STATUS_PATTERN = "^(" + "|".join(STAFF_STATUSES) + ")$"


class StaffMemberCreate(BaseModel):
    """직원 생성 요청 스키마.

    Staff member creation request schema.
    The first of ``location_ids`` becomes the primary location.

    Attributes:
        first_name / last_name: 이름 (Name)
        email: 이메일, 사업장 내 고유 (Email, unique per business)
        user_id: 인증 사용자 ID (Identity user id, optional)
        location_ids: 배정 매장 목록 (Locations to assign)
        service_ids: 배정 서비스 목록 (Catalog services to assign)
    """

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, max_length=50)
    job_title: str | None = Field(None, max_length=100)
    photo_url: str | None = Field(None, max_length=500)
    user_id: UUID | None = None
    permission_level: str = Field("Basic", pattern=_LEVEL_PATTERN)
    is_bookable: bool = True
    location_ids: list[UUID] = []
    service_ids: list[UUID] = []


class StaffMemberUpdate(BaseModel):
    """직원 수정 요청 스키마 (부분 업데이트)."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    job_title: str | None = Field(None, max_length=100)
    photo_url: str | None = Field(None, max_length=500)
    user_id: UUID | None = None
    permission_level: str | None = Field(None, pattern=_LEVEL_PATTERN)
    is_bookable: bool | None = None


class StaffStatusUpdate(BaseModel):
    """직원 상태 변경 요청 (Active/Suspended/Archived)."""

    status: str = Field(..., pattern=_STATUS_PATTERN)


class StaffLocationAssign(BaseModel):
    """매장 배정 요청 — 첫 배정이면 자동으로 주 매장.

    Location assignment request. The first location becomes primary.
    """

    location_id: UUID
    role_id: UUID | None = None
    is_primary: bool = False


class StaffLocationResponse(BaseModel):
    id: str
    location_id: str
    role_id: str | None
    role_name: str | None
    is_primary: bool
    assigned_at: datetime


class StaffServiceAssign(BaseModel):
    service_id: UUID


class StaffServiceResponse(BaseModel):
    id: str
    service_id: str
    assigned_at: datetime


class StaffMemberResponse(BaseModel):
    """직원 응답 스키마 (Staff member with assignments)."""

    id: str
    business_id: str
    user_id: str | None
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: str | None
    job_title: str | None
    photo_url: str | None
    permission_level: str
    status: str
    is_bookable: bool
    locations: list[StaffLocationResponse]
    service_ids: list[str]
    created_at: datetime
    updated_at: datetime
