"""Attendance tests"""

import pytest
import pytest_asyncio

from teamhub.services.database import DuplicateRecordError
from tests.factories import attendance_request


class TestAttendanceStore:

    def test_one_record_per_user_and_day(self, test_db):
        test_db.insert_attendance({"id": "a1", "user_id": "u1", "date": "2025-02-03", "status": "Present"})

        with pytest.raises(DuplicateRecordError):
            test_db.insert_attendance({"id": "a2", "user_id": "u1", "date": "2025-02-03", "status": "Absent"})

        test_db.insert_attendance({"id": "a3", "user_id": "u1", "date": "2025-02-04", "status": "Absent"})
        assert len(test_db.attendance) == 2


class TestMarkAttendance:

    @pytest.mark.asyncio
    async def test_create_record(self, test_client, test_db, member_user, admin_user, admin_headers):
        response = await test_client.post(
            "/api/attendance", json=attendance_request(member_user["id"], notes="  on site "), headers=admin_headers
        )

        assert response.status_code == 200
        payload = response.json()
        assert payload["message"] == "Attendance created successfully"
        record = payload["data"]
        assert record["user_email"] == "member@college.edu"
        assert record["date"] == "2025-02-03"
        assert record["notes"] == "on site"
        assert record["marked_by"] == admin_user["id"]

    @pytest.mark.asyncio
    async def test_same_day_twice_updates(self, test_client, test_db, member_user, admin_headers):
        first = await test_client.post(
            "/api/attendance", json=attendance_request(member_user["id"]), headers=admin_headers
        )
        second = await test_client.post(
            "/api/attendance",
            json=attendance_request(member_user["id"], status="Absent", task_status="Blocked"),
            headers=admin_headers,
        )

        assert second.json()["message"] == "Attendance updated successfully"
        assert second.json()["data"]["id"] == first.json()["data"]["id"]
        assert len(test_db.attendance) == 1
        stored = test_db.attendance.all()[0]
        assert stored["status"] == "Absent"
        assert stored["task_status"] == "Blocked"

    @pytest.mark.asyncio
    async def test_concurrent_insert_is_conflict(self, test_client, test_db, member_user, admin_headers, monkeypatch):
        first = await test_client.post(
            "/api/attendance", json=attendance_request(member_user["id"]), headers=admin_headers
        )
        assert first.status_code == 200

        # another request stored the record between lookup and insert
        monkeypatch.setattr(test_db, "get_attendance_for_day", lambda user_id, date: None)
        response = await test_client.post(
            "/api/attendance", json=attendance_request(member_user["id"], status="Absent"), headers=admin_headers
        )

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "message": "Attendance record already exists for this user on this date",
        }
        assert len(test_db.attendance) == 1
        assert test_db.attendance.all()[0]["status"] == "Present"

    @pytest.mark.asyncio
    async def test_unknown_user(self, test_client, admin_headers):
        response = await test_client.post(
            "/api/attendance", json=attendance_request("nobody"), headers=admin_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_status(self, test_client, member_user, admin_headers):
        response = await test_client.post(
            "/api/attendance", json=attendance_request(member_user["id"], status="Late"), headers=admin_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_requires_auth(self, test_client, member_user):
        response = await test_client.post("/api/attendance", json=attendance_request(member_user["id"]))
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_bulk_collects_failures(self, test_client, test_db, member_user, spoc_user, admin_headers):
        body = {"attendance_records": [
            attendance_request(member_user["id"]),
            attendance_request(spoc_user["id"], status="Absent"),
            attendance_request("ghost"),
        ]}

        response = await test_client.post("/api/attendance/bulk", json=body, headers=admin_headers)

        data = response.json()["data"]
        assert data["successful"] == 2
        assert data["failed"] == 1
        assert data["errors"][0]["record"]["user_id"] == "ghost"
        assert data["errors"][0]["error"] == "User not found"
        assert len(test_db.attendance) == 2

    @pytest.mark.asyncio
    async def test_bulk_requires_records(self, test_client, admin_headers):
        response = await test_client.post(
            "/api/attendance/bulk", json={"attendance_records": []}, headers=admin_headers
        )
        assert response.status_code == 400


class TestAttendanceQueries:

    @pytest_asyncio.fixture
    async def marked(self, test_client, member_user, spoc_user, admin_headers):
        for user, day, status in [
            (member_user, "2025-02-03", "Present"),
            (spoc_user, "2025-02-03", "Absent"),
            (member_user, "2025-02-04", "Present"),
            (spoc_user, "2025-02-04", "Present"),
            (member_user, "2025-02-10", "Absent"),
        ]:
            response = await test_client.post(
                "/api/attendance", json=attendance_request(user["id"], date=day, status=status),
                headers=admin_headers,
            )
            assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_list_newest_first_with_filters(self, test_client, marked, member_user, admin_headers):
        response = await test_client.get("/api/attendance", headers=admin_headers)
        payload = response.json()
        assert [r["date"] for r in payload["data"]][:2] == ["2025-02-10", "2025-02-04"]
        assert payload["pagination"]["total_records"] == 5

        response = await test_client.get(
            "/api/attendance", params={"user_id": member_user["id"], "date": "2025-02-04"}, headers=admin_headers
        )
        assert len(response.json()["data"]) == 1

    @pytest.mark.asyncio
    async def test_pagination(self, test_client, marked, admin_headers):
        response = await test_client.get("/api/attendance", params={"limit": 2, "page": 3}, headers=admin_headers)

        payload = response.json()
        assert len(payload["data"]) == 1
        assert payload["pagination"] == {
            "current_page": 3,
            "total_pages": 3,
            "total_records": 5,
            "has_next": False,
            "has_prev": True,
        }

    @pytest.mark.asyncio
    async def test_summary_grouped_by_day_and_status(self, test_client, marked, admin_headers):
        response = await test_client.get(
            "/api/attendance/summary",
            params={"start_date": "2025-02-01", "end_date": "2025-02-05"},
            headers=admin_headers,
        )

        assert response.json()["data"] == [
            {"date": "2025-02-04", "status": "Present", "count": 2},
            {"date": "2025-02-03", "status": "Absent", "count": 1},
            {"date": "2025-02-03", "status": "Present", "count": 1},
        ]

    @pytest.mark.asyncio
    async def test_summary_rejects_reversed_range(self, test_client, admin_headers):
        response = await test_client.get(
            "/api/attendance/summary",
            params={"start_date": "2025-02-05", "end_date": "2025-02-01"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_by_date(self, test_client, marked, admin_headers):
        response = await test_client.get("/api/attendance/date/2025-02-03", headers=admin_headers)
        assert {r["status"] for r in response.json()["data"]} == {"Present", "Absent"}

    @pytest.mark.asyncio
    async def test_delete(self, test_client, test_db, marked, admin_headers):
        record_id = test_db.attendance.all()[0]["id"]

        response = await test_client.delete(f"/api/attendance/{record_id}", headers=admin_headers)
        assert response.status_code == 200
        assert len(test_db.attendance) == 4

        response = await test_client.delete(f"/api/attendance/{record_id}", headers=admin_headers)
        assert response.status_code == 404
