"""스케줄 API 테스트.

Schedule API tests — Shift CRUD, the conflict gate headers, bulk creation,
recurring patterns, occurrence listing, and the scheduling policy.
"""

import uuid

from httpx import AsyncClient
from sqlalchemy import select

from app.models.schedule import Shift
from tests.conftest import auth_header, base_url


def schedule_url(business_id) -> str:
    return f"{base_url(business_id)}/schedule"


def shift_body(staff, day="2024-06-03", start="09:00", end="12:00", **extra) -> dict:
    body = {
        "staff_member_id": str(staff.id),
        "date": day,
        "start_time": start,
        "end_time": end,
    }
    body.update(extra)
    return body


def pattern_body(staff, rrule="FREQ=WEEKLY;BYDAY=MO,WE,FR", **extra) -> dict:
    body = {
        "staff_member_id": str(staff.id),
        "rrule": rrule,
        "start_time": "09:00",
        "end_time": "17:00",
        "pattern_start": "2024-06-01",
        "shift_type": "opening",
    }
    body.update(extra)
    return body


class TestShiftCreate:
    """근무 생성 및 충돌 게이트 테스트."""

    async def test_create_shift(self, client: AsyncClient, manager_token, business_id, employee):
        res = await client.post(
            schedule_url(business_id),
            json=shift_body(employee, shift_type="closing"),
            headers=auth_header(manager_token),
        )
        assert res.status_code == 201
        data = res.json()
        assert data["start_time"] == "09:00"
        assert data["end_time"] == "12:00"
        assert data["shift_type"] == "Closing"
        assert data["status"] == "Scheduled"
        assert data["staff_member_name"] == "Eli Tester"

    async def test_unknown_shift_type_becomes_custom(self, client: AsyncClient, manager_token, business_id, employee):
        res = await client.post(
            schedule_url(business_id),
            json=shift_body(employee, shift_type="Graveyard"),
            headers=auth_header(manager_token),
        )
        assert res.json()["shift_type"] == "Custom"

    async def test_inverted_window_rejected(self, client: AsyncClient, manager_token, business_id, employee):
        res = await client.post(
            schedule_url(business_id),
            json=shift_body(employee, start="14:00", end="09:00"),
            headers=auth_header(manager_token),
        )
        assert res.status_code == 422

    async def test_overlap_blocks_until_override(self, client: AsyncClient, manager_token, business_id, employee):
        """오류 충돌은 X-Override-Conflicts로만 우회."""
        first = await client.post(schedule_url(business_id), json=shift_body(employee), headers=auth_header(manager_token))
        assert first.status_code == 201

        body = shift_body(employee, start="11:00", end="14:00")
        res = await client.post(schedule_url(business_id), json=body, headers=auth_header(manager_token))
        assert res.status_code == 409
        detail = res.json()["detail"]
        assert detail[0]["type"] == "overlap"
        assert detail[0]["severity"] == "error"
        assert detail[0]["message"] == "Overlaps existing shift 09:00-12:00 on 2024-06-03"

        res = await client.post(
            schedule_url(business_id), json=body,
            headers=auth_header(manager_token, **{"X-Force-Create": "true"}),
        )
        assert res.status_code == 409

        res = await client.post(
            schedule_url(business_id), json=body,
            headers=auth_header(manager_token, **{"X-Override-Conflicts": "true"}),
        )
        assert res.status_code == 201

    async def test_touching_shifts_allowed(self, client: AsyncClient, manager_token, business_id, employee):
        await client.post(schedule_url(business_id), json=shift_body(employee), headers=auth_header(manager_token))
        res = await client.post(
            schedule_url(business_id),
            json=shift_body(employee, start="12:00", end="15:00"),
            headers=auth_header(manager_token),
        )
        assert res.status_code == 201

    async def test_daily_overtime_warning_needs_force(
        self, client: AsyncClient, owner_token, manager_token, business_id, employee,
    ):
        """경고 충돌은 X-Force-Create로 우회."""
        res = await client.put(f"{base_url(business_id)}/scheduling-policy", json={
            "daily_overtime_hours": 8,
            "weekly_overtime_hours": 40,
        }, headers=auth_header(owner_token))
        assert res.status_code == 200
        assert res.json()["is_default"] is False

        body = shift_body(employee, start="09:00", end="18:00")
        res = await client.post(schedule_url(business_id), json=body, headers=auth_header(manager_token))
        assert res.status_code == 409
        detail = res.json()["detail"]
        assert detail == [{
            "type": "overtime",
            "message": "Daily hours (9.0h) would exceed 8h threshold",
            "severity": "warning",
        }]

        res = await client.post(
            schedule_url(business_id), json=body,
            headers=auth_header(manager_token, **{"X-Force-Create": "true"}),
        )
        assert res.status_code == 201

    async def test_employee_cannot_create(self, client: AsyncClient, employee_token, business_id, employee):
        res = await client.post(schedule_url(business_id), json=shift_body(employee), headers=auth_header(employee_token))
        assert res.status_code == 403

    async def test_staff_of_other_business_rejected(self, client: AsyncClient, manager_token, business_id):
        body = {"staff_member_id": str(uuid.uuid4()), "date": "2024-06-03", "start_time": "09:00", "end_time": "12:00"}
        res = await client.post(schedule_url(business_id), json=body, headers=auth_header(manager_token))
        assert res.status_code == 400


class TestConflictCheckAndBulk:
    """충돌 사전 검사 및 일괄 생성 테스트."""

    async def test_dry_run_does_not_write(self, client: AsyncClient, manager_token, business_id, employee, db):
        await client.post(schedule_url(business_id), json=shift_body(employee), headers=auth_header(manager_token))
        res = await client.post(
            f"{schedule_url(business_id)}/conflicts",
            json=shift_body(employee, start="10:00", end="11:00"),
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        assert [c["type"] for c in res.json()] == ["overlap"]

        count = len((await db.execute(select(Shift))).scalars().all())
        assert count == 1

    async def test_dry_run_excludes_shift_being_edited(self, client: AsyncClient, manager_token, business_id, employee):
        created = await client.post(schedule_url(business_id), json=shift_body(employee), headers=auth_header(manager_token))
        res = await client.post(
            f"{schedule_url(business_id)}/conflicts",
            json=shift_body(employee, start="10:00", end="11:00", exclude_shift_id=created.json()["id"]),
            headers=auth_header(manager_token),
        )
        assert res.json() == []

    async def test_bulk_create(self, client: AsyncClient, manager_token, business_id, employee, manager):
        res = await client.post(f"{schedule_url(business_id)}/bulk", json={"shifts": [
            shift_body(employee, day="2024-06-03"),
            shift_body(employee, day="2024-06-04"),
            shift_body(manager, day="2024-06-03"),
        ]}, headers=auth_header(manager_token))
        assert res.status_code == 201
        assert len(res.json()) == 3

    async def test_bulk_conflict_within_batch_is_all_or_nothing(
        self, client: AsyncClient, manager_token, business_id, employee, db,
    ):
        """같은 요청 안의 근무끼리도 검사하며 하나라도 막히면 전체 실패."""
        res = await client.post(f"{schedule_url(business_id)}/bulk", json={"shifts": [
            shift_body(employee, start="09:00", end="12:00"),
            shift_body(employee, start="11:00", end="13:00"),
        ]}, headers=auth_header(manager_token))
        assert res.status_code == 409
        assert res.json()["detail"][0]["type"] == "overlap"
        assert (await db.execute(select(Shift))).scalars().all() == []


class TestShiftUpdateDelete:
    """근무 수정/삭제 테스트."""

    async def test_update_rechecks_conflicts(self, client: AsyncClient, manager_token, business_id, employee):
        await client.post(schedule_url(business_id), json=shift_body(employee), headers=auth_header(manager_token))
        later = await client.post(
            schedule_url(business_id),
            json=shift_body(employee, start="13:00", end="15:00"),
            headers=auth_header(manager_token),
        )
        url = f"{schedule_url(business_id)}/{later.json()['id']}"

        res = await client.put(url, json={"start_time": "11:00"}, headers=auth_header(manager_token))
        assert res.status_code == 409

        res = await client.put(url, json={"start_time": "12:30", "notes": "Late start"}, headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.json()["start_time"] == "12:30"
        assert res.json()["notes"] == "Late start"

    async def test_status_only_update_skips_gate(self, client: AsyncClient, manager_token, business_id, employee):
        created = await client.post(schedule_url(business_id), json=shift_body(employee), headers=auth_header(manager_token))
        res = await client.put(
            f"{schedule_url(business_id)}/{created.json()['id']}",
            json={"status": "Confirmed"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        assert res.json()["status"] == "Confirmed"

    async def test_delete_completed_rejected(self, client: AsyncClient, manager_token, business_id, employee):
        created = await client.post(
            schedule_url(business_id),
            json=shift_body(employee, status="Completed"),
            headers=auth_header(manager_token),
        )
        url = f"{schedule_url(business_id)}/{created.json()['id']}"
        assert (await client.delete(url, headers=auth_header(manager_token))).status_code == 400

    async def test_delete_shift(self, client: AsyncClient, manager_token, business_id, employee):
        created = await client.post(schedule_url(business_id), json=shift_body(employee), headers=auth_header(manager_token))
        url = f"{schedule_url(business_id)}/{created.json()['id']}"
        assert (await client.delete(url, headers=auth_header(manager_token))).status_code == 204
        assert (await client.get(url, headers=auth_header(manager_token))).status_code == 404

    async def test_list_in_range(self, client: AsyncClient, manager_token, business_id, employee):
        await client.post(schedule_url(business_id), json=shift_body(employee, day="2024-06-03"), headers=auth_header(manager_token))
        await client.post(schedule_url(business_id), json=shift_body(employee, day="2024-06-20"), headers=auth_header(manager_token))
        res = await client.get(
            schedule_url(business_id),
            params={"start_date": "2024-06-01", "end_date": "2024-06-07"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        assert [s["date"] for s in res.json()] == ["2024-06-03"]


class TestRecurringAndOccurrences:
    """반복 패턴 및 발생 목록 테스트."""

    async def create_pattern(self, client, token, business_id, staff, **extra):
        res = await client.post(
            f"{schedule_url(business_id)}/recurring",
            json=pattern_body(staff, **extra),
            headers=auth_header(token),
        )
        assert res.status_code == 201
        return res.json()

    async def occurrences(self, client, token, business_id, start="2024-06-03", end="2024-06-09"):
        res = await client.get(
            f"{schedule_url(business_id)}/occurrences",
            params={"start_date": start, "end_date": end},
            headers=auth_header(token),
        )
        assert res.status_code == 200
        return res.json()

    async def test_create_pattern(self, client: AsyncClient, manager_token, business_id, employee):
        data = await self.create_pattern(client, manager_token, business_id, employee)
        assert data["shift_type"] == "Opening"
        assert data["is_active"] is True
        assert data["staff_member_name"] == "Eli Tester"

    async def test_invalid_rrule_rejected(self, client: AsyncClient, manager_token, business_id, employee):
        res = await client.post(
            f"{schedule_url(business_id)}/recurring",
            json=pattern_body(employee, rrule="FREQ=HOURLY;BYDAY=MO"),
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400

    async def test_ancient_pattern_start_rejected(self, client: AsyncClient, manager_token, business_id, employee):
        res = await client.post(
            f"{schedule_url(business_id)}/recurring",
            json=pattern_body(employee, rrule="FREQ=MONTHLY;BYMONTHDAY=31;COUNT=5", pattern_start="0001-02-01"),
            headers=auth_header(manager_token),
        )
        assert res.status_code == 422

    async def test_occurrences_expand_pattern(self, client: AsyncClient, manager_token, business_id, employee):
        pattern = await self.create_pattern(client, manager_token, business_id, employee)
        items = await self.occurrences(client, manager_token, business_id)
        assert [i["date"] for i in items] == ["2024-06-03", "2024-06-05", "2024-06-07"]
        assert all(i["is_from_pattern"] and i["shift_id"] is None for i in items)
        assert all(i["pattern_id"] == pattern["id"] for i in items)
        assert items[0]["start_time"] == "09:00"

    async def test_override_replaces_occurrence(self, client: AsyncClient, manager_token, business_id, employee):
        """패턴 연결 근무는 같은 날짜의 발생을 대체하며 날짜당 1건."""
        pattern = await self.create_pattern(client, manager_token, business_id, employee)
        body = shift_body(employee, day="2024-06-05", start="12:00", end="16:00", pattern_id=pattern["id"])
        res = await client.post(schedule_url(business_id), json=body, headers=auth_header(manager_token))
        assert res.status_code == 201
        assert res.json()["is_override"] is True

        items = await self.occurrences(client, manager_token, business_id)
        assert len(items) == 3
        wednesday = items[1]
        assert wednesday["date"] == "2024-06-05"
        assert wednesday["shift_id"] == res.json()["id"]
        assert wednesday["start_time"] == "12:00"

        duplicate = await client.post(
            schedule_url(business_id),
            json={**body, "start_time": "17:00", "end_time": "18:00"},
            headers=auth_header(manager_token),
        )
        assert duplicate.status_code == 409

    async def test_inactive_pattern_not_expanded(self, client: AsyncClient, manager_token, business_id, employee):
        pattern = await self.create_pattern(client, manager_token, business_id, employee)
        res = await client.put(
            f"{schedule_url(business_id)}/recurring/{pattern['id']}",
            json={"is_active": False},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        assert await self.occurrences(client, manager_token, business_id) == []

    async def test_delete_pattern_unlinks_shifts(self, client: AsyncClient, manager_token, business_id, employee, db):
        pattern = await self.create_pattern(client, manager_token, business_id, employee)
        shift = await client.post(
            schedule_url(business_id),
            json=shift_body(employee, day="2024-06-05", pattern_id=pattern["id"]),
            headers=auth_header(manager_token),
        )
        res = await client.delete(f"{schedule_url(business_id)}/recurring/{pattern['id']}", headers=auth_header(manager_token))
        assert res.status_code == 204

        items = await self.occurrences(client, manager_token, business_id)
        assert [i["shift_id"] for i in items] == [shift.json()["id"]]
        assert items[0]["pattern_id"] is None

    async def test_linked_shift_keeps_its_staff_member(
        self, client: AsyncClient, manager_token, business_id, employee, manager,
    ):
        """패턴 연결 근무는 다른 직원에게 재배정 불가."""
        pattern = await self.create_pattern(client, manager_token, business_id, employee)
        linked = await client.post(
            schedule_url(business_id),
            json=shift_body(employee, day="2024-06-03", pattern_id=pattern["id"]),
            headers=auth_header(manager_token),
        )
        res = await client.put(
            f"{schedule_url(business_id)}/{linked.json()['id']}",
            json={"staff_member_id": str(manager.id)},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400
        items = await self.occurrences(client, manager_token, business_id)
        assert items[0]["shift_id"] == linked.json()["id"]
        assert items[0]["staff_member_id"] == str(employee.id)

    async def test_linked_shift_cannot_move_onto_taken_date(
        self, client: AsyncClient, manager_token, business_id, employee,
    ):
        pattern = await self.create_pattern(client, manager_token, business_id, employee)
        await client.post(
            schedule_url(business_id),
            json=shift_body(employee, day="2024-06-03", pattern_id=pattern["id"]),
            headers=auth_header(manager_token),
        )
        second = await client.post(
            schedule_url(business_id),
            json=shift_body(employee, day="2024-06-05", pattern_id=pattern["id"]),
            headers=auth_header(manager_token),
        )
        url = f"{schedule_url(business_id)}/{second.json()['id']}"

        res = await client.put(url, json={"date": "2024-06-03", "start_time": "13:00", "end_time": "15:00"},
                               headers=auth_header(manager_token))
        assert res.status_code == 409

        res = await client.put(url, json={"date": "2024-06-07"}, headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.json()["pattern_id"] == pattern["id"]

    async def test_bulk_rejects_same_occurrence_twice(
        self, client: AsyncClient, manager_token, business_id, employee, db,
    ):
        pattern = await self.create_pattern(client, manager_token, business_id, employee)
        res = await client.post(f"{schedule_url(business_id)}/bulk", json={"shifts": [
            shift_body(employee, day="2024-06-05", start="09:00", end="10:00", pattern_id=pattern["id"]),
            shift_body(employee, day="2024-06-05", start="15:00", end="16:00", pattern_id=pattern["id"]),
        ]}, headers=auth_header(manager_token))
        assert res.status_code == 409
        assert (await db.execute(select(Shift))).scalars().all() == []

    async def test_range_limit(self, client: AsyncClient, manager_token, business_id):
        res = await client.get(
            f"{schedule_url(business_id)}/occurrences",
            params={"start_date": "2024-01-01", "end_date": "2025-06-01"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400

        res = await client.get(
            f"{schedule_url(business_id)}/occurrences",
            params={"start_date": "2024-06-09", "end_date": "2024-06-03"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 400


class TestSchedulingPolicy:
    """충돌 정책 테스트."""

    async def test_default_policy(self, client: AsyncClient, manager_token, business_id):
        res = await client.get(f"{base_url(business_id)}/scheduling-policy", headers=auth_header(manager_token))
        assert res.status_code == 200
        data = res.json()
        assert data["is_default"] is True
        assert data["weekly_overtime_hours"] == 40.0

    async def test_manager_cannot_change_policy(self, client: AsyncClient, manager_token, business_id):
        res = await client.put(
            f"{base_url(business_id)}/scheduling-policy",
            json={"location_capacity": 2},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 403

    async def test_location_capacity(
        self, client: AsyncClient, owner_token, manager_token, business_id, location_id, employee, manager,
    ):
        await client.put(
            f"{base_url(business_id)}/scheduling-policy",
            json={"location_capacity": 1},
            headers=auth_header(owner_token),
        )
        await client.post(
            schedule_url(business_id),
            json=shift_body(manager, location_id=str(location_id)),
            headers=auth_header(manager_token),
        )
        res = await client.post(
            schedule_url(business_id),
            json=shift_body(employee, location_id=str(location_id)),
            headers=auth_header(manager_token),
        )
        assert res.status_code == 409
        assert res.json()["detail"][0]["type"] == "location_conflict"


class TestDeletedStaffExcluded:
    """소프트 삭제된 직원의 근무와 패턴은 조회에서 제외."""

    async def delete_employee(self, client, owner_token, business_id, employee):
        res = await client.delete(f"{base_url(business_id)}/staff/{employee.id}", headers=auth_header(owner_token))
        assert res.status_code == 204

    async def test_shifts_and_occurrences_hidden(
        self, client: AsyncClient, owner_token, manager_token, business_id, employee,
    ):
        shift = await client.post(schedule_url(business_id), json=shift_body(employee), headers=auth_header(manager_token))
        await client.post(
            f"{schedule_url(business_id)}/recurring",
            json=pattern_body(employee, rrule="FREQ=DAILY", start_time="13:00", end_time="17:00"),
            headers=auth_header(manager_token),
        )
        await self.delete_employee(client, owner_token, business_id, employee)

        params = {"start_date": "2024-06-03", "end_date": "2024-06-04"}
        listing = await client.get(schedule_url(business_id), params=params, headers=auth_header(manager_token))
        assert listing.json() == []
        occurrences = await client.get(
            f"{schedule_url(business_id)}/occurrences", params=params, headers=auth_header(manager_token),
        )
        assert occurrences.json() == []
        patterns = await client.get(f"{schedule_url(business_id)}/recurring", headers=auth_header(manager_token))
        assert patterns.json() == []

        single = await client.get(f"{schedule_url(business_id)}/{shift.json()['id']}", headers=auth_header(manager_token))
        assert single.status_code == 404

    async def test_deleted_staff_not_counted_for_capacity(
        self, client: AsyncClient, owner_token, manager_token, business_id, location_id, employee, manager,
    ):
        await client.put(
            f"{base_url(business_id)}/scheduling-policy",
            json={"location_capacity": 1},
            headers=auth_header(owner_token),
        )
        await client.post(
            schedule_url(business_id),
            json=shift_body(employee, location_id=str(location_id)),
            headers=auth_header(manager_token),
        )
        await self.delete_employee(client, owner_token, business_id, employee)

        res = await client.post(
            schedule_url(business_id),
            json=shift_body(manager, location_id=str(location_id)),
            headers=auth_header(manager_token),
        )
        assert res.status_code == 201


class TestConflictHeadersCors:
    """충돌 우회 헤더는 요청 헤더로 허용됨."""

    async def test_preflight_allows_bypass_headers(self, client: AsyncClient, business_id):
        res = await client.options(schedule_url(business_id), headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-Force-Create, X-Override-Conflicts",
        })
        assert res.status_code == 200
        allowed = res.headers["access-control-allow-headers"].lower()
        assert "x-force-create" in allowed
        assert "x-override-conflicts" in allowed

    async def test_bypass_headers_not_exposed_on_responses(self, client: AsyncClient):
        res = await client.get("/health", headers={"Origin": "http://localhost:5173"})
        assert res.status_code == 200
        assert "access-control-expose-headers" not in res.headers
