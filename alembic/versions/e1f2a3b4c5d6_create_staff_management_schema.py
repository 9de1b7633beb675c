"""create_staff_management_schema

Revision ID: e1f2a3b4c5d6
Revises:
Create Date: 2026-10-18 09:00:00.000000

직원 관리 스키마 생성 — 역할, 직원, 매장/서비스 배정, 근무, 반복 패턴,
충돌 정책, 휴가 유형 및 요청.
Create the staff management schema: roles, staff members, location and
service assignments, shifts, recurring patterns, scheduling policies,
time-off types and requests.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = 'e1f2a3b4c5d6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # roles — 사업장별 역할, 권한 플래그 JSONB
    # Per-business roles with permission flags
    op.create_table(
        'roles',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('business_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('is_default', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('is_immutable', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('permissions', JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('business_id', 'name', name='uq_role_business_name'),
    )
    op.create_index('ix_roles_business', 'roles', ['business_id'])

    # staff_members — 직원, 소프트 삭제 (Staff records, soft-deleted)
    op.create_table(
        'staff_members',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('business_id', UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('job_title', sa.String(100), nullable=True),
        sa.Column('photo_url', sa.String(500), nullable=True),
        sa.Column('permission_level', sa.String(20), server_default='Basic', nullable=False),
        sa.Column('status', sa.String(20), server_default='Active', nullable=False),
        sa.Column('is_bookable', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('business_id', 'email', name='uq_staff_business_email'),
    )
    op.create_index('ix_staff_members_business', 'staff_members', ['business_id'])
    op.create_index('ix_staff_members_user', 'staff_members', ['user_id'])

    # staff_locations — 직원-매장 배정, 매장별 역할 1개
    # Staff-location assignment with one role per location
    op.create_table(
        'staff_locations',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('staff_member_id', UUID(as_uuid=True), sa.ForeignKey('staff_members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('location_id', UUID(as_uuid=True), nullable=False),
        sa.Column('role_id', UUID(as_uuid=True), sa.ForeignKey('roles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_primary', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('staff_member_id', 'location_id', name='uq_staff_location'),
    )
    op.create_index('ix_staff_locations_location', 'staff_locations', ['location_id'])

    # staff_services — 직원-서비스 배정 (Catalog services a staff member performs)
    op.create_table(
        'staff_services',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('staff_member_id', UUID(as_uuid=True), sa.ForeignKey('staff_members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('service_id', UUID(as_uuid=True), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('staff_member_id', 'service_id', name='uq_staff_service'),
    )
    op.create_index('ix_staff_services_service', 'staff_services', ['service_id'])

    # recurring_shift_patterns — RRULE 반복 패턴 (Occurrences are expanded on read)
    op.create_table(
        'recurring_shift_patterns',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('business_id', UUID(as_uuid=True), nullable=False),
        sa.Column('staff_member_id', UUID(as_uuid=True), sa.ForeignKey('staff_members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('location_id', UUID(as_uuid=True), nullable=True),
        sa.Column('rrule', sa.String(500), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('pattern_start', sa.Date(), nullable=False),
        sa.Column('pattern_end', sa.Date(), nullable=True),
        sa.Column('shift_type', sa.String(20), server_default='Custom', nullable=False),
        sa.Column('notes', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_patterns_business_staff', 'recurring_shift_patterns', ['business_id', 'staff_member_id'])
    op.create_index('ix_patterns_business_location', 'recurring_shift_patterns', ['business_id', 'location_id'])

    # shifts — 실제 근무, 패턴 발생 대체 가능 (Concrete shifts, may override an occurrence)
    op.create_table(
        'shifts',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('business_id', UUID(as_uuid=True), nullable=False),
        sa.Column('staff_member_id', UUID(as_uuid=True), sa.ForeignKey('staff_members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('shift_type', sa.String(20), server_default='Custom', nullable=False),
        sa.Column('status', sa.String(20), server_default='Scheduled', nullable=False),
        sa.Column('location_id', UUID(as_uuid=True), nullable=True),
        sa.Column('notes', sa.String(500), nullable=True),
        sa.Column('pattern_id', UUID(as_uuid=True), sa.ForeignKey('recurring_shift_patterns.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_override', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_shifts_business_date', 'shifts', ['business_id', 'date'])
    op.create_index('ix_shifts_staff_date', 'shifts', ['staff_member_id', 'date'])
    op.create_index('ix_shifts_location_date', 'shifts', ['location_id', 'date'])

    # scheduling_policies — 사업장별 충돌 임계값 (Per-business conflict thresholds)
    op.create_table(
        'scheduling_policies',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('business_id', UUID(as_uuid=True), nullable=False),
        sa.Column('daily_overtime_hours', sa.Float(), nullable=True),
        sa.Column('weekly_overtime_hours', sa.Float(), nullable=True),
        sa.Column('location_capacity', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('business_id', name='uq_scheduling_policy_business'),
    )

    # time_off_types — 휴가 유형 (Vacation, Sick, Personal + custom)
    op.create_table(
        'time_off_types',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('business_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('color', sa.String(7), server_default='#9E9E9E', nullable=False),
        sa.Column('is_default', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('business_id', 'name', name='uq_time_off_type_business_name'),
    )

    # time_off_requests — 휴가 요청, 승인 워크플로우 (Requests with approval workflow)
    op.create_table(
        'time_off_requests',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('business_id', UUID(as_uuid=True), nullable=False),
        sa.Column('staff_member_id', UUID(as_uuid=True), sa.ForeignKey('staff_members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('time_off_type_id', UUID(as_uuid=True), sa.ForeignKey('time_off_types.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('is_all_day', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=True),
        sa.Column('end_time', sa.Time(), nullable=True),
        sa.Column('status', sa.String(20), server_default='Pending', nullable=False),
        sa.Column('notes', sa.String(1000), nullable=True),
        sa.Column('approval_notes', sa.String(1000), nullable=True),
        sa.Column('approved_by_staff_id', UUID(as_uuid=True), sa.ForeignKey('staff_members.id', ondelete='SET NULL'), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_time_off_business_staff_status', 'time_off_requests', ['business_id', 'staff_member_id', 'status'])
    op.create_index('ix_time_off_business_dates', 'time_off_requests', ['business_id', 'start_date', 'end_date'])


def downgrade() -> None:
    # 의존 순서 역순으로 삭제 — Drop in reverse dependency order
    op.drop_index('ix_time_off_business_dates', table_name='time_off_requests')
    op.drop_index('ix_time_off_business_staff_status', table_name='time_off_requests')
    op.drop_table('time_off_requests')
    op.drop_table('time_off_types')
    op.drop_table('scheduling_policies')
    op.drop_index('ix_shifts_location_date', table_name='shifts')
    op.drop_index('ix_shifts_staff_date', table_name='shifts')
    op.drop_index('ix_shifts_business_date', table_name='shifts')
    op.drop_table('shifts')
    op.drop_index('ix_patterns_business_location', table_name='recurring_shift_patterns')
    op.drop_index('ix_patterns_business_staff', table_name='recurring_shift_patterns')
    op.drop_table('recurring_shift_patterns')
    op.drop_index('ix_staff_services_service', table_name='staff_services')
    op.drop_table('staff_services')
    op.drop_index('ix_staff_locations_location', table_name='staff_locations')
    op.drop_table('staff_locations')
    op.drop_index('ix_staff_members_user', table_name='staff_members')
    op.drop_index('ix_staff_members_business', table_name='staff_members')
    op.drop_table('staff_members')
    op.drop_index('ix_roles_business', table_name='roles')
    op.drop_table('roles')
