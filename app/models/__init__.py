"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    staff: 직원, 매장 배정, 서비스 배정 (StaffMember, StaffLocation, StaffServiceAssignment)
    role: 역할 및 권한 플래그 (Role with permission flags)
    schedule: 근무, 반복 패턴, 충돌 정책 (Shift, RecurringShiftPattern, SchedulingPolicy)
    time_off: 휴가 유형 및 요청 (TimeOffType, TimeOffRequest)
"""

from app.models.staff import StaffMember, StaffLocation, StaffServiceAssignment
from app.models.role import Role
from app.models.schedule import Shift, RecurringShiftPattern, SchedulingPolicy
from app.models.time_off import TimeOffType, TimeOffRequest

__all__ = [
    "StaffMember", "StaffLocation", "StaffServiceAssignment",
    "Role",
    "Shift", "RecurringShiftPattern", "SchedulingPolicy",
    "TimeOffType", "TimeOffRequest",
]
