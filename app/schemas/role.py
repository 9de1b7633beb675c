"""역할 관련 Pydantic 요청/응답 스키마 정의.

Role Pydantic request/response schema definitions.
Permission flags are exchanged as the RolePermissions model itself.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.permissions import RolePermissions


class RoleCreate(BaseModel):
    """역할 생성 요청 스키마.

    Role creation request. ``clone_from_role_id`` copies another role's flags
    and takes precedence over ``permissions``; with neither, all flags are off.
    """

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    permissions: RolePermissions | None = None
    clone_from_role_id: UUID | None = None


class RoleUpdate(BaseModel):
    """역할 수정 요청 스키마 (부분 업데이트)."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    permissions: RolePermissions | None = None


class RoleResponse(BaseModel):
    id: str
    business_id: str
    name: str
    description: str | None
    is_default: bool
    is_immutable: bool
    permissions: RolePermissions
    created_at: datetime
    updated_at: datetime


class RoleAssignRequest(BaseModel):
    """매장 배정에 역할 지정 요청 (Assign a role on an existing staff location)."""

    staff_member_id: UUID
    location_id: UUID
    role_id: UUID


class PermissionActionResponse(BaseModel):
    key: str  # "Area.Action"
    description: str


class PermissionAreaResponse(BaseModel):
    area: str
    actions: list[PermissionActionResponse]


class PermissionCheckResponse(BaseModel):
    """권한 확인 결과 (Result of a permission check)."""

    staff_member_id: str
    location_id: str | None
    permission: str
    granted: bool
