"""사업장 API 라우터 패키지 — 사업장 범위 엔드포인트 통합.

Business API Router package — Aggregates every endpoint scoped to one
business into a single router, mounted under
``/api/v1/businesses/{business_id}``.

Included routers:
    - staff: 직원 및 매장/서비스 배정 (Staff members and assignments)
    - roles: 역할 및 권한 (Roles and permission checks)
    - recurring: 반복 근무 패턴 (Recurring shift patterns)
    - schedule: 근무, 충돌 검사, 발생 목록, 가용성 (Shifts, conflicts, occurrences, availability)
    - time_off: 휴가 유형 및 요청 (Time-off types and requests)
    - scheduling_policy: 충돌 정책 (Conflict thresholds)
"""

from fastapi import APIRouter

from app.api.business.staff import router as staff_router
from app.api.business.roles import router as roles_router
from app.api.business.recurring import router as recurring_router
from app.api.business.schedule import router as schedule_router
from app.api.business.time_off import router as time_off_router
from app.api.business.scheduling_policy import router as scheduling_policy_router

business_router: APIRouter = APIRouter()

business_router.include_router(staff_router, prefix="/staff", tags=["Staff"])
business_router.include_router(roles_router, prefix="/roles", tags=["Roles"])
# /schedule/{shift_id}보다 먼저 등록 — Registered before /schedule/{shift_id}
business_router.include_router(recurring_router, prefix="/schedule/recurring", tags=["Recurring Shifts"])
business_router.include_router(schedule_router, prefix="/schedule", tags=["Schedule"])
business_router.include_router(time_off_router, prefix="/time-off", tags=["Time Off"])
business_router.include_router(scheduling_policy_router, prefix="/scheduling-policy", tags=["Scheduling Policy"])
