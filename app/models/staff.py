"""직원 관련 SQLAlchemy ORM 모델 정의.

Staff-related SQLAlchemy ORM model definitions.
Staff members belong to a business (tenant) and are assigned to locations
and catalog services that live in other services, referenced by id only.

Tables:
    - staff_members: 직원 레코드, 소프트 삭제 (Staff records, soft-deleted)
    - staff_locations: 직원-매장 배정 및 매장별 역할 (Location assignment with per-location role)
    - staff_services: 직원-서비스 배정 (Service assignment)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, ForeignKey, UniqueConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, SoftDeleteMixin

# 레거시 권한 레벨 — Owner는 모든 권한 우회 (deprecated)
# Legacy permission levels; "Owner" bypasses role checks (deprecated)
PERMISSION_LEVELS: tuple[str, ...] = ("Basic", "Low", "Medium", "High", "Owner")

# 직원 상태 — Staff status values
STAFF_STATUSES: tuple[str, ...] = ("Active", "Suspended", "Archived")


class StaffMember(SoftDeleteMixin, Base):
    """직원 모델 — 사업장 소속 직원 레코드.

    Staff member model — A person working for a business.
    Deleting a staff member only sets is_deleted/deleted_at; soft-deleted rows
    are hidden from ORM queries by the session-level filter.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        business_id: 소속 사업장 ID (Tenant partition key)
        user_id: 인증 사용자 ID, JWT sub (Identity user id, nullable until linked)
        first_name / last_name: 이름 (Name)
        email: 이메일, 사업장 내 고유 (Email, unique per business)
        permission_level: 레거시 권한 레벨 (Legacy level: Basic/Low/Medium/High/Owner)
        status: 상태 (Active/Suspended/Archived)
        is_bookable: 예약 가능 여부 (Whether clients can book this staff member)
    """

    __tablename__ = "staff_members"

    # 직원 고유 식별자 — Staff member unique identifier (UUID v4)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 사업장 — Business (tenant) id, owned by another service
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 인증 사용자 ID — Identity provider user id (JWT "sub")
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    # 이름 — First name
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    # 성 — Last name
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    # 이메일 — Email (unique per business)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    # 전화번호 — Phone (optional)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # 직함 — Job title (optional)
    job_title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # 프로필 사진 URL — Photo URL (optional)
    photo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 레거시 권한 레벨 — Legacy permission level
    permission_level: Mapped[str] = mapped_column(String(20), default="Basic", nullable=False)
    # 상태 — Status: "Active" / "Suspended" / "Archived"
    status: Mapped[str] = mapped_column(String(20), default="Active", nullable=False)
    # 예약 가능 여부 — Bookable by clients
    is_bookable: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("business_id", "email", name="uq_staff_business_email"),
        Index("ix_staff_members_business", "business_id"),
        Index("ix_staff_members_user", "user_id"),
    )

    # 관계 — Relationships (owned children, cascade delete)
    locations = relationship("StaffLocation", cascade="all, delete-orphan", passive_deletes=True)
    services = relationship("StaffServiceAssignment", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class StaffLocation(Base):
    """직원-매장 배정 모델 — 매장별 역할 1개.

    Staff-location assignment. One row per (staff member, location), so a
    staff member holds at most one role per location.

    Attributes:
        staff_member_id: 직원 FK (Owning staff member)
        location_id: 매장 ID, 외부 서비스 (Location id, external)
        role_id: 역할 FK, 선택 (Role at this location, optional)
        is_primary: 주 근무 매장 여부 (Primary location flag)
    """

    __tablename__ = "staff_locations"

    # 배정 고유 식별자 — Assignment unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 직원 FK — Staff member (CASCADE: 직원 삭제 시 배정도 삭제)
    staff_member_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("staff_members.id", ondelete="CASCADE"), nullable=False)
    # 매장 ID — Location id (external, no FK)
    location_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 역할 FK — Role at this location (SET NULL: 역할 삭제 시 해제)
    role_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("roles.id", ondelete="SET NULL"), nullable=True)
    # 주 매장 여부 — Primary location flag
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 배정 일시 — Assignment timestamp (UTC)
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("staff_member_id", "location_id", name="uq_staff_location"),
        Index("ix_staff_locations_location", "location_id"),
    )


class StaffServiceAssignment(Base):
    """직원-서비스 배정 모델 (Which catalog services a staff member performs)."""

    __tablename__ = "staff_services"

    # 배정 고유 식별자 — Assignment unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 직원 FK — Staff member (CASCADE)
    staff_member_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("staff_members.id", ondelete="CASCADE"), nullable=False)
    # 서비스 ID — Catalog service id (external, no FK)
    service_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 배정 일시 — Assignment timestamp (UTC)
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("staff_member_id", "service_id", name="uq_staff_service"),
        Index("ix_staff_services_service", "service_id"),
    )
