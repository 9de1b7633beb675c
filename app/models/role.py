"""역할 SQLAlchemy ORM 모델 정의.

Role SQLAlchemy ORM model definition.
Roles are per-business bundles of 16 permission flags. Owner, Manager and
Employee are seeded lazily as default roles.

Tables:
    - roles: 사업장별 역할 (Roles scoped by business)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import JSON, String, Boolean, DateTime, UniqueConstraint, Index, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.domain.permissions import RolePermissions


class Role(Base):
    """역할 모델 — 권한 플래그 묶음.

    Role model — A named set of permission flags within a business.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        business_id: 소속 사업장 ID (Tenant partition key)
        name: 역할 이름, 사업장 내 고유 (Role name, unique per business)
        description: 설명 (Optional description)
        is_default: 기본 역할 여부 — 삭제 불가 (Seeded default role; cannot be deleted)
        is_immutable: 이름 변경 불가 여부 (Name cannot be changed)
        permissions: 권한 플래그 JSON (Permission flags as JSON)

    Constraints:
        uq_role_business_name: 사업장 내 역할 이름 고유 (Unique role name per business)
    """

    __tablename__ = "roles"

    # 역할 고유 식별자 — Role unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 사업장 — Business (tenant) id
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 역할 이름 — Role display name (e.g. "Owner", "Front Desk")
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # 설명 — Optional description
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 기본 역할 여부 — Seeded default (Owner/Manager/Employee)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 이름 변경 불가 — Name locked
    is_immutable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 권한 플래그 — 16 boolean flags (JSONB on PostgreSQL)
    permissions: Mapped[dict] = mapped_column(JSON().with_variant(JSONB, "postgresql"), default=dict, nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("business_id", "name", name="uq_role_business_name"),
        Index("ix_roles_business", "business_id"),
    )

    @property
    def flags(self) -> RolePermissions:
        """저장된 JSON을 RolePermissions로 변환 (Stored JSON as RolePermissions)."""
        return RolePermissions.model_validate(self.permissions or {})
