"""휴가 API 테스트.

Time-off API tests — Default types, request filing, the approval workflow,
pending counts, type deletion rules and approved time-off in availability.
"""

from httpx import AsyncClient

from tests.conftest import auth_header, base_url


def time_off_url(business_id) -> str:
    return f"{base_url(business_id)}/time-off"


async def vacation_type_id(client: AsyncClient, token: str, business_id) -> str:
    res = await client.get(f"{time_off_url(business_id)}/types", headers=auth_header(token))
    return next(t["id"] for t in res.json() if t["name"] == "Vacation")


async def file_request(client, token, business_id, type_id, start="2024-06-10", end="2024-06-12", **extra):
    body = {"time_off_type_id": type_id, "start_date": start, "end_date": end}
    body.update(extra)
    return await client.post(f"{time_off_url(business_id)}/requests", json=body, headers=auth_header(token))


class TestTimeOffTypes:
    """휴가 유형 테스트."""

    async def test_default_types_seeded(self, client: AsyncClient, employee_token, business_id):
        res = await client.get(f"{time_off_url(business_id)}/types", headers=auth_header(employee_token))
        assert res.status_code == 200
        data = res.json()
        assert {t["name"] for t in data} == {"Vacation", "Sick", "Personal"}
        assert all(t["is_default"] and t["is_active"] for t in data)

    async def test_create_type_with_default_color(self, client: AsyncClient, manager_token, business_id):
        res = await client.post(
            f"{time_off_url(business_id)}/types",
            json={"name": "Training"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 201
        assert res.json()["color"] == "#9E9E9E"

        dup = await client.post(
            f"{time_off_url(business_id)}/types",
            json={"name": "training"},
            headers=auth_header(manager_token),
        )
        assert dup.status_code == 409

    async def test_employee_cannot_create_type(self, client: AsyncClient, employee_token, business_id):
        res = await client.post(
            f"{time_off_url(business_id)}/types",
            json={"name": "Jury Duty"},
            headers=auth_header(employee_token),
        )
        assert res.status_code == 403

    async def test_delete_unused_type(self, client: AsyncClient, manager_token, business_id):
        created = await client.post(
            f"{time_off_url(business_id)}/types", json={"name": "Study"}, headers=auth_header(manager_token),
        )
        res = await client.delete(
            f"{time_off_url(business_id)}/types/{created.json()['id']}", headers=auth_header(manager_token),
        )
        assert res.status_code == 204
        names = {t["name"] for t in (await client.get(
            f"{time_off_url(business_id)}/types", headers=auth_header(manager_token),
        )).json()}
        assert "Study" not in names

    async def test_delete_type_with_approved_request_rejected(
        self, client: AsyncClient, manager_token, employee_token, business_id,
    ):
        type_id = await vacation_type_id(client, employee_token, business_id)
        filed = await file_request(client, employee_token, business_id, type_id)
        await client.post(
            f"{time_off_url(business_id)}/requests/{filed.json()['id']}/approve",
            json={}, headers=auth_header(manager_token),
        )
        res = await client.delete(f"{time_off_url(business_id)}/types/{type_id}", headers=auth_header(manager_token))
        assert res.status_code == 400

    async def test_delete_type_with_pending_request_deactivates(
        self, client: AsyncClient, manager_token, employee_token, business_id,
    ):
        """승인되지 않은 요청이 참조하면 삭제 대신 비활성화."""
        type_id = await vacation_type_id(client, employee_token, business_id)
        await file_request(client, employee_token, business_id, type_id)
        res = await client.delete(f"{time_off_url(business_id)}/types/{type_id}", headers=auth_header(manager_token))
        assert res.status_code == 204

        types = (await client.get(f"{time_off_url(business_id)}/types", headers=auth_header(manager_token))).json()
        vacation = next(t for t in types if t["id"] == type_id)
        assert vacation["is_active"] is False

        res = await file_request(client, employee_token, business_id, type_id, start="2024-07-01", end="2024-07-01")
        assert res.status_code == 400


class TestTimeOffRequests:
    """휴가 요청 및 승인 워크플로우 테스트."""

    async def test_employee_files_own_request(self, client: AsyncClient, employee_token, business_id, employee):
        type_id = await vacation_type_id(client, employee_token, business_id)
        res = await file_request(client, employee_token, business_id, type_id, notes="Family trip")
        assert res.status_code == 201
        data = res.json()
        assert data["status"] == "Pending"
        assert data["staff_member_id"] == str(employee.id)
        assert data["staff_member_name"] == "Eli Tester"
        assert data["time_off_type_name"] == "Vacation"
        assert data["approved_by_staff_id"] is None

    async def test_partial_day_needs_times(self, client: AsyncClient, employee_token, business_id):
        type_id = await vacation_type_id(client, employee_token, business_id)
        res = await file_request(client, employee_token, business_id, type_id, start="2024-06-10", end="2024-06-10",
                                 is_all_day=False)
        assert res.status_code == 422

        res = await file_request(client, employee_token, business_id, type_id, start="2024-06-10", end="2024-06-10",
                                 is_all_day=False, start_time="13:00", end_time="15:00")
        assert res.status_code == 201
        assert res.json()["start_time"] == "13:00"

    async def test_request_for_other_staff_needs_manage(
        self, client: AsyncClient, employee_token, manager_token, business_id, employee, manager,
    ):
        type_id = await vacation_type_id(client, employee_token, business_id)
        res = await file_request(client, employee_token, business_id, type_id, staff_member_id=str(manager.id))
        assert res.status_code == 403

        res = await file_request(client, manager_token, business_id, type_id, staff_member_id=str(employee.id))
        assert res.status_code == 201
        assert res.json()["staff_member_id"] == str(employee.id)

    async def test_pending_count(self, client: AsyncClient, employee_token, manager_token, business_id):
        type_id = await vacation_type_id(client, employee_token, business_id)
        await file_request(client, employee_token, business_id, type_id)

        res = await client.get(f"{time_off_url(business_id)}/requests/pending-count", headers=auth_header(employee_token))
        assert res.status_code == 403

        res = await client.get(f"{time_off_url(business_id)}/requests/pending-count", headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.json() == {"count": 1}

    async def test_approve_once(self, client: AsyncClient, employee_token, manager_token, business_id, manager):
        """Pending에서만 승인 가능하며 승인자가 기록됨."""
        type_id = await vacation_type_id(client, employee_token, business_id)
        filed = await file_request(client, employee_token, business_id, type_id)
        url = f"{time_off_url(business_id)}/requests/{filed.json()['id']}"

        res = await client.post(f"{url}/approve", json={"notes": "Enjoy"}, headers=auth_header(manager_token))
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "Approved"
        assert data["approved_by_staff_id"] == str(manager.id)
        assert data["approved_by_name"] == "Mina Tester"
        assert data["approval_notes"] == "Enjoy"
        assert data["approved_at"] is not None

        again = await client.post(f"{url}/approve", json={}, headers=auth_header(manager_token))
        assert again.status_code == 400
        cancel = await client.post(f"{url}/cancel", headers=auth_header(employee_token))
        assert cancel.status_code == 400

    async def test_employee_cannot_approve(self, client: AsyncClient, employee_token, business_id):
        type_id = await vacation_type_id(client, employee_token, business_id)
        filed = await file_request(client, employee_token, business_id, type_id)
        res = await client.post(
            f"{time_off_url(business_id)}/requests/{filed.json()['id']}/approve",
            json={}, headers=auth_header(employee_token),
        )
        assert res.status_code == 403

    async def test_deny(self, client: AsyncClient, employee_token, manager_token, business_id):
        type_id = await vacation_type_id(client, employee_token, business_id)
        filed = await file_request(client, employee_token, business_id, type_id)
        res = await client.post(
            f"{time_off_url(business_id)}/requests/{filed.json()['id']}/deny",
            json={"notes": "Short staffed"}, headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        assert res.json()["status"] == "Denied"
        assert res.json()["approval_notes"] == "Short staffed"

    async def test_overlapping_approved_request_rejected(
        self, client: AsyncClient, employee_token, manager_token, business_id,
    ):
        type_id = await vacation_type_id(client, employee_token, business_id)
        filed = await file_request(client, employee_token, business_id, type_id)
        await client.post(
            f"{time_off_url(business_id)}/requests/{filed.json()['id']}/approve",
            json={}, headers=auth_header(manager_token),
        )
        res = await file_request(client, employee_token, business_id, type_id, start="2024-06-12", end="2024-06-14")
        assert res.status_code == 400

        # 대기 중인 요청끼리는 겹쳐도 허용 (Pending requests may overlap)
        res = await file_request(client, employee_token, business_id, type_id, start="2024-06-20", end="2024-06-21")
        assert res.status_code == 201
        res = await file_request(client, employee_token, business_id, type_id, start="2024-06-21", end="2024-06-22")
        assert res.status_code == 201

    async def test_cancel_own_request(self, client: AsyncClient, employee_token, business_id):
        type_id = await vacation_type_id(client, employee_token, business_id)
        filed = await file_request(client, employee_token, business_id, type_id)
        res = await client.post(
            f"{time_off_url(business_id)}/requests/{filed.json()['id']}/cancel",
            headers=auth_header(employee_token),
        )
        assert res.status_code == 200
        assert res.json()["status"] == "Cancelled"
        assert res.json()["approved_by_staff_id"] is None

    async def test_list_requests_filtered(self, client: AsyncClient, employee_token, manager_token, business_id):
        type_id = await vacation_type_id(client, employee_token, business_id)
        await file_request(client, employee_token, business_id, type_id)
        filed = await file_request(client, employee_token, business_id, type_id, start="2024-08-01", end="2024-08-02")
        await client.post(
            f"{time_off_url(business_id)}/requests/{filed.json()['id']}/deny",
            json={}, headers=auth_header(manager_token),
        )

        res = await client.get(
            f"{time_off_url(business_id)}/requests",
            params={"status": "Pending"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        assert res.json()["total"] == 1
        assert res.json()["items"][0]["start_date"] == "2024-06-10"

    async def test_requests_of_deleted_staff_hidden(
        self, client: AsyncClient, employee_token, manager_token, owner_token, business_id, employee,
    ):
        """삭제된 직원의 요청은 목록, 대기 건수, 단건 조회에서 제외."""
        type_id = await vacation_type_id(client, employee_token, business_id)
        filed = await file_request(client, employee_token, business_id, type_id)
        res = await client.delete(f"{base_url(business_id)}/staff/{employee.id}", headers=auth_header(owner_token))
        assert res.status_code == 204

        listing = await client.get(f"{time_off_url(business_id)}/requests", headers=auth_header(manager_token))
        assert listing.json()["total"] == 0
        assert listing.json()["items"] == []
        count = await client.get(f"{time_off_url(business_id)}/requests/pending-count", headers=auth_header(manager_token))
        assert count.json() == {"count": 0}
        single = await client.get(
            f"{time_off_url(business_id)}/requests/{filed.json()['id']}", headers=auth_header(manager_token),
        )
        assert single.status_code == 404


class TestTimeOffAvailability:
    """승인된 휴가의 가용성 반영 테스트."""

    async def test_approved_time_off_in_availability(
        self, client: AsyncClient, employee_token, manager_token, business_id, employee,
    ):
        type_id = await vacation_type_id(client, employee_token, business_id)
        filed = await file_request(client, employee_token, business_id, type_id, start="2024-06-10", end="2024-06-11")
        url = f"{base_url(business_id)}/schedule/availability/{employee.id}"
        params = {"start_date": "2024-06-09", "end_date": "2024-06-15"}

        pending = await client.get(url, params=params, headers=auth_header(manager_token))
        assert pending.status_code == 200
        assert pending.json() == []

        await client.post(
            f"{time_off_url(business_id)}/requests/{filed.json()['id']}/approve",
            json={}, headers=auth_header(manager_token),
        )
        slots = (await client.get(url, params=params, headers=auth_header(manager_token))).json()
        assert [(s["date"], s["type"], s["start_time"], s["end_time"]) for s in slots] == [
            ("2024-06-10", "time-off", "00:00", "23:59"),
            ("2024-06-11", "time-off", "00:00", "23:59"),
        ]
        assert slots[0]["source_id"] == filed.json()["id"]
