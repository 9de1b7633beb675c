"""권한 플래그 및 권한 평가기.

Permission flags and evaluator.
A role carries 16 boolean flags addressed by "Area.Action" keys. The
evaluator applies ordered rules; the first rule that returns a decision wins
and the default is deny.

Rule order:
    1. LegacyOwnerRule — permission_level == "Owner" 이면 전체 허용 (deprecated)
    2. RoleAssignmentRule — 해당 매장에 배정된 역할의 플래그로 판정
"""

from dataclasses import dataclass

from pydantic import BaseModel

# "Area.Action" 키 → 플래그 필드명 (Permission key to flag field)
PERMISSION_KEYS: dict[str, str] = {
    "Scheduling.View": "view_schedule",
    "Scheduling.Manage": "manage_schedule",
    "TimeOff.View": "view_time_off",
    "TimeOff.Manage": "manage_time_off",
    "TimeOff.Approve": "approve_time_off",
    "Staff.View": "view_staff",
    "Staff.Manage": "manage_staff",
    "Services.View": "view_services",
    "Services.Manage": "manage_services",
    "Clients.View": "view_clients",
    "Clients.Manage": "manage_clients",
    "Reports.View": "view_reports",
    "Settings.ManageBusiness": "manage_business_settings",
    "Settings.ManageLocation": "manage_location_settings",
    "Bookings.View": "view_bookings",
    "Bookings.Manage": "manage_bookings",
}

# 권한 영역 카탈로그 — UI 편집기용 (Permission area catalogue for role editors)
PERMISSION_AREAS: list[dict] = [
    {"area": "Scheduling", "actions": [
        {"key": "Scheduling.View", "description": "View staff schedules"},
        {"key": "Scheduling.Manage", "description": "Create and edit schedules"},
    ]},
    {"area": "TimeOff", "actions": [
        {"key": "TimeOff.View", "description": "View time-off requests"},
        {"key": "TimeOff.Manage", "description": "Create and edit time-off requests"},
        {"key": "TimeOff.Approve", "description": "Approve or deny time-off requests"},
    ]},
    {"area": "Staff", "actions": [
        {"key": "Staff.View", "description": "View staff members"},
        {"key": "Staff.Manage", "description": "Add, edit, and remove staff members"},
    ]},
    {"area": "Services", "actions": [
        {"key": "Services.View", "description": "View services catalog"},
        {"key": "Services.Manage", "description": "Add, edit, and remove services"},
    ]},
    {"area": "Clients", "actions": [
        {"key": "Clients.View", "description": "View client information"},
        {"key": "Clients.Manage", "description": "Add, edit, and remove clients"},
    ]},
    {"area": "Reports", "actions": [
        {"key": "Reports.View", "description": "View business reports and analytics"},
    ]},
    {"area": "Settings", "actions": [
        {"key": "Settings.ManageBusiness", "description": "Manage business-level settings"},
        {"key": "Settings.ManageLocation", "description": "Manage location-level settings"},
    ]},
    {"area": "Bookings", "actions": [
        {"key": "Bookings.View", "description": "View appointments and bookings"},
        {"key": "Bookings.Manage", "description": "Create, edit, and cancel bookings"},
    ]},
]

LEGACY_OWNER_LEVEL = "Owner"


class RolePermissions(BaseModel):
    """역할 권한 플래그 — 기본값은 모두 거부.

    Role permission flags. Every flag defaults to False.
    Stored as JSON on the role row and exchanged as-is over the API.
    """

    view_schedule: bool = False
    manage_schedule: bool = False
    view_time_off: bool = False
    manage_time_off: bool = False
    approve_time_off: bool = False
    view_staff: bool = False
    manage_staff: bool = False
    view_services: bool = False
    manage_services: bool = False
    view_clients: bool = False
    manage_clients: bool = False
    view_reports: bool = False
    manage_business_settings: bool = False
    manage_location_settings: bool = False
    view_bookings: bool = False
    manage_bookings: bool = False

    def has_permission(self, key: str) -> bool:
        """'Area.Action' 키의 허용 여부. 알 수 없는 키는 거부."""
        field = PERMISSION_KEYS.get(key)
        if field is None:
            return False
        return bool(getattr(self, field))

    @classmethod
    def owner(cls) -> "RolePermissions":
        return cls(**{field: True for field in PERMISSION_KEYS.values()})

    @classmethod
    def manager(cls) -> "RolePermissions":
        return cls(
            view_schedule=True,
            manage_schedule=True,
            view_time_off=True,
            manage_time_off=True,
            approve_time_off=True,
            view_staff=True,
            view_services=True,
            view_clients=True,
            view_bookings=True,
            manage_bookings=True,
        )

    @classmethod
    def employee(cls) -> "RolePermissions":
        return cls(view_schedule=True, view_time_off=True, view_bookings=True)


@dataclass(frozen=True)
class AccessContext:
    """평가 입력 — 직원의 레거시 레벨과 매장 배정 상태.

    Evaluation input for one staff member at one location.

    Attributes:
        permission_level: 레거시 권한 레벨 (Legacy permission level)
        location_assigned: 해당 매장 배정 여부 (Whether a StaffLocation row exists)
        role_permissions: 배정된 역할의 플래그, 없으면 None (Assigned role flags, or None)
    """

    permission_level: str
    location_assigned: bool = False
    role_permissions: RolePermissions | None = None


class LegacyOwnerRule:
    """레거시 Owner 레벨이면 무조건 허용 (deprecated bypass)."""

    def decide(self, context: AccessContext, key: str) -> bool | None:
        if context.permission_level == LEGACY_OWNER_LEVEL:
            return True
        return None


class RoleAssignmentRule:
    """매장에 배정된 역할로 판정. 배정/역할이 없으면 거부."""

    def decide(self, context: AccessContext, key: str) -> bool | None:
        if not context.location_assigned or context.role_permissions is None:
            return False
        return context.role_permissions.has_permission(key)


class PermissionEvaluator:
    """순서가 있는 규칙 목록으로 권한을 판정합니다.

    Evaluates a permission key against ordered rules. The first rule that
    returns True or False decides; if every rule abstains, access is denied.
    """

    def __init__(self, rules: tuple = (LegacyOwnerRule(), RoleAssignmentRule())) -> None:
        self.rules = rules

    def evaluate(self, context: AccessContext, key: str) -> bool:
        for rule in self.rules:
            decision = rule.decide(context, key)
            if decision is not None:
                return decision
        return False


permission_evaluator: PermissionEvaluator = PermissionEvaluator()
