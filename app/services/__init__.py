"""서비스 패키지 — 비즈니스 로직 계층.

Service package — Business rules for staff management.
Services flush through repositories and never commit; routers commit once
the whole request succeeded.

Modules:
    staff_service: 직원, 매장/서비스 배정 (Staff members and assignments)
    role_service: 역할 및 기본 역할 (Roles and seeded defaults)
    permission_service: 권한 평가기 DB 연동 (Permission evaluation)
    shift_service: 근무 CRUD와 충돌 게이트 (Shifts and the conflict gate)
    recurring_shift_service: 반복 근무 패턴 (Recurring patterns)
    schedule_service: 발생 목록과 가용성 (Occurrences and availability)
    scheduling_policy_service: 충돌 임계값 (Conflict thresholds)
    time_off_service: 휴가 유형과 승인 워크플로우 (Time-off workflow)
"""
