"""역할 API 테스트.

Role API tests — Default roles, reserved names, cloning, locked Owner
permissions, role assignment on locations, and permission checks.
"""

import uuid

from httpx import AsyncClient

from app.domain.permissions import RolePermissions
from tests.conftest import auth_header, base_url


def roles_url(business_id) -> str:
    return f"{base_url(business_id)}/roles"


class TestRoleRead:
    """역할 조회 테스트."""

    async def test_default_roles_listed_first(self, client: AsyncClient, owner_token, business_id):
        res = await client.get(roles_url(business_id), headers=auth_header(owner_token))
        assert res.status_code == 200
        data = res.json()
        assert {r["name"] for r in data} == {"Owner", "Manager", "Employee"}
        assert all(r["is_default"] and r["is_immutable"] for r in data)
        owner_role = next(r for r in data if r["name"] == "Owner")
        assert all(owner_role["permissions"].values())

    async def test_permission_areas(self, client: AsyncClient, owner_token, business_id):
        res = await client.get(f"{roles_url(business_id)}/permission-areas", headers=auth_header(owner_token))
        assert res.status_code == 200
        areas = res.json()
        assert [a["area"] for a in areas] == [
            "Scheduling", "TimeOff", "Staff", "Services", "Clients", "Reports", "Settings", "Bookings",
        ]
        assert sum(len(a["actions"]) for a in areas) == 16

    async def test_employee_cannot_list(self, client: AsyncClient, employee_token, business_id):
        """Employee 역할은 Staff.View 없음 → 403."""
        res = await client.get(roles_url(business_id), headers=auth_header(employee_token))
        assert res.status_code == 403


class TestRoleCreate:
    """역할 생성 테스트."""

    async def test_create_custom_role(self, client: AsyncClient, owner_token, business_id):
        res = await client.post(roles_url(business_id), json={
            "name": "Front Desk",
            "description": "Reception",
            "permissions": {"view_bookings": True, "manage_bookings": True},
        }, headers=auth_header(owner_token))
        assert res.status_code == 201
        data = res.json()
        assert data["is_default"] is False
        assert data["permissions"]["manage_bookings"] is True
        assert data["permissions"]["manage_schedule"] is False

    async def test_clone_permissions(self, client: AsyncClient, owner_token, business_id, roles):
        res = await client.post(roles_url(business_id), json={
            "name": "Assistant Manager",
            "clone_from_role_id": str(roles["Manager"].id),
            "permissions": {"manage_business_settings": True},
        }, headers=auth_header(owner_token))
        assert res.status_code == 201
        assert res.json()["permissions"] == RolePermissions.manager().model_dump()

    async def test_reserved_name_rejected(self, client: AsyncClient, owner_token, business_id, roles):
        res = await client.post(roles_url(business_id), json={"name": "manager"}, headers=auth_header(owner_token))
        assert res.status_code == 400

    async def test_duplicate_name_rejected(self, client: AsyncClient, owner_token, business_id, roles):
        await client.post(roles_url(business_id), json={"name": "Colorist"}, headers=auth_header(owner_token))
        res = await client.post(roles_url(business_id), json={"name": "Colorist"}, headers=auth_header(owner_token))
        assert res.status_code == 409

    async def test_manager_cannot_create(self, client: AsyncClient, manager_token, business_id):
        """Manager 기본 역할은 Settings.ManageBusiness 없음 → 403."""
        res = await client.post(roles_url(business_id), json={"name": "Intern"}, headers=auth_header(manager_token))
        assert res.status_code == 403


class TestRoleUpdateDelete:
    """역할 수정/삭제 테스트."""

    async def test_default_role_name_locked(self, client: AsyncClient, owner_token, business_id, roles):
        res = await client.put(
            f"{roles_url(business_id)}/{roles['Employee'].id}",
            json={"name": "Staff"},
            headers=auth_header(owner_token),
        )
        assert res.status_code == 400

    async def test_owner_permissions_locked(self, client: AsyncClient, owner_token, business_id, roles):
        res = await client.put(
            f"{roles_url(business_id)}/{roles['Owner'].id}",
            json={"permissions": RolePermissions().model_dump()},
            headers=auth_header(owner_token),
        )
        assert res.status_code == 400

    async def test_update_default_role_permissions(self, client: AsyncClient, owner_token, business_id, roles):
        """Owner 외 기본 역할의 권한은 수정 가능."""
        flags = RolePermissions.employee().model_dump()
        flags["view_staff"] = True
        res = await client.put(
            f"{roles_url(business_id)}/{roles['Employee'].id}",
            json={"permissions": flags},
            headers=auth_header(owner_token),
        )
        assert res.status_code == 200
        assert res.json()["permissions"]["view_staff"] is True

    async def test_delete_default_role_rejected(self, client: AsyncClient, owner_token, business_id, roles):
        res = await client.delete(f"{roles_url(business_id)}/{roles['Manager'].id}", headers=auth_header(owner_token))
        assert res.status_code == 400

    async def test_delete_role_in_use_rejected(
        self, client: AsyncClient, owner_token, business_id, location_id, employee,
    ):
        created = await client.post(roles_url(business_id), json={"name": "Stylist"}, headers=auth_header(owner_token))
        role_id = created.json()["id"]
        await client.post(f"{roles_url(business_id)}/assign", json={
            "staff_member_id": str(employee.id),
            "location_id": str(location_id),
            "role_id": role_id,
        }, headers=auth_header(owner_token))

        res = await client.delete(f"{roles_url(business_id)}/{role_id}", headers=auth_header(owner_token))
        assert res.status_code == 400

    async def test_delete_custom_role(self, client: AsyncClient, owner_token, business_id):
        created = await client.post(roles_url(business_id), json={"name": "Temp"}, headers=auth_header(owner_token))
        role_id = created.json()["id"]
        res = await client.delete(f"{roles_url(business_id)}/{role_id}", headers=auth_header(owner_token))
        assert res.status_code == 204
        res = await client.get(f"{roles_url(business_id)}/{role_id}", headers=auth_header(owner_token))
        assert res.status_code == 404


class TestRoleAssignmentAndCheck:
    """역할 배정 및 권한 확인 테스트."""

    async def check(self, client, token, business_id, staff_id, permission, location_id=None):
        params = {"staff_member_id": str(staff_id), "permission": permission}
        if location_id is not None:
            params["location_id"] = str(location_id)
        return await client.get(f"{roles_url(business_id)}/check", params=params, headers=auth_header(token))

    async def test_check_uses_role_flags(self, client: AsyncClient, owner_token, business_id, employee):
        res = await self.check(client, owner_token, business_id, employee.id, "Scheduling.View")
        assert res.status_code == 200
        assert res.json()["granted"] is True

        res = await self.check(client, owner_token, business_id, employee.id, "Scheduling.Manage")
        assert res.json()["granted"] is False

    async def test_unknown_permission_key(self, client: AsyncClient, owner_token, business_id, employee):
        res = await self.check(client, owner_token, business_id, employee.id, "Payroll.Run")
        assert res.status_code == 400

    async def test_unassigned_location_denied(self, client: AsyncClient, owner_token, business_id, employee):
        res = await self.check(client, owner_token, business_id, employee.id, "Scheduling.View", uuid.uuid4())
        assert res.json()["granted"] is False

    async def test_legacy_owner_granted_everywhere(self, client: AsyncClient, owner_token, business_id, owner):
        res = await self.check(client, owner_token, business_id, owner.id, "Settings.ManageBusiness", uuid.uuid4())
        assert res.json()["granted"] is True

    async def test_assign_role_takes_effect(
        self, client: AsyncClient, owner_token, business_id, location_id, employee, roles,
    ):
        """역할 변경은 즉시 반영 (캐시 없음)."""
        res = await client.post(f"{roles_url(business_id)}/assign", json={
            "staff_member_id": str(employee.id),
            "location_id": str(location_id),
            "role_id": str(roles["Manager"].id),
        }, headers=auth_header(owner_token))
        assert res.status_code == 200
        assert res.json()["role_name"] == "Manager"

        res = await self.check(client, owner_token, business_id, employee.id, "Scheduling.Manage", location_id)
        assert res.json()["granted"] is True

    async def test_assign_requires_location_assignment(
        self, client: AsyncClient, owner_token, business_id, employee, roles,
    ):
        res = await client.post(f"{roles_url(business_id)}/assign", json={
            "staff_member_id": str(employee.id),
            "location_id": str(uuid.uuid4()),
            "role_id": str(roles["Manager"].id),
        }, headers=auth_header(owner_token))
        assert res.status_code == 404
