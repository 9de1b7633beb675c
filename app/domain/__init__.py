"""도메인 코어 패키지 — DB/HTTP와 무관한 순수 스케줄링 로직.

Domain core package — Pure scheduling logic with no database or HTTP coupling.
Services load records through repositories and hand plain values to these
modules; everything here is deterministic and safe to call repeatedly.

Modules:
    recurrence: 반복 규칙 파싱 및 전개 (Recurrence rule parsing and expansion)
    conflicts: 근무 충돌 검사 (Shift overlap / overtime / location capacity checks)
    availability: 가용성 슬롯 병합 (Busy-slot aggregation)
    permissions: 권한 플래그 및 평가기 (Permission flags and evaluator)
    time_off: 휴가 요청 상태 전이 (Time-off request state machine)
"""
