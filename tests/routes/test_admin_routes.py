# tests/routes/test_admin_routes.py
"""HTTP tests for /api/admin: booking review and resource blocking."""

import pytest

from campus_reservations.core.config import Settings

MONDAY = "2024-06-10"
TUESDAY = "2024-06-11"


@pytest.fixture
def app_settings():
    """Bookings start pending so the review flow can be exercised."""
    return Settings(
        environment="test",
        database_url="sqlite://",
        redis_url=None,
        reject_past_dates=False,
        initial_booking_status="pending",
    )


@pytest.fixture
def pending_booking(client, api_resource, student_headers):
    response = client.post(
        "/api/bookings",
        json={
            "resource_id": api_resource["id"],
            "booking_date": MONDAY,
            "start_time": "09:00",
            "end_time": "10:00",
        },
        headers=student_headers,
    )
    assert response.json()["status"] == "pending"
    return response.json()


class TestReview:
    def test_approve(self, client, pending_booking, admin_headers):
        response = client.put(f"/api/admin/bookings/{pending_booking['id']}/approve", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "approved"

    def test_approve_requires_admin(self, client, pending_booking, student_headers):
        response = client.put(
            f"/api/admin/bookings/{pending_booking['id']}/approve", headers=student_headers
        )
        assert response.status_code == 403

    def test_reject_with_reason(self, client, pending_booking, admin_headers):
        response = client.put(
            f"/api/admin/bookings/{pending_booking['id']}/reject",
            json={"reason": "Room reserved for exams"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "rejected"
        assert response.json()["rejection_reason"] == "Room reserved for exams"

    def test_reject_without_body(self, client, pending_booking, admin_headers):
        response = client.put(f"/api/admin/bookings/{pending_booking['id']}/reject", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["rejection_reason"] is None

    def test_approve_rejected_booking(self, client, pending_booking, admin_headers):
        client.put(f"/api/admin/bookings/{pending_booking['id']}/reject", headers=admin_headers)

        response = client.put(f"/api/admin/bookings/{pending_booking['id']}/approve", headers=admin_headers)

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["code"] == "INVALID_TRANSITION"
        assert detail["details"] == {"current_status": "rejected", "event": "approve"}

    def test_complete(self, client, pending_booking, admin_headers):
        response = client.put(f"/api/admin/bookings/{pending_booking['id']}/complete", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["completed_at"] is not None

    def test_rejected_booking_frees_the_slot(self, client, pending_booking, admin_headers, other_student_headers, api_resource):
        client.put(f"/api/admin/bookings/{pending_booking['id']}/reject", headers=admin_headers)
        response = client.post(
            "/api/bookings",
            json={
                "resource_id": api_resource["id"],
                "booking_date": MONDAY,
                "start_time": "09:00",
                "end_time": "10:00",
            },
            headers=other_student_headers,
        )
        assert response.status_code == 201

    def test_unknown_booking(self, client, admin_headers):
        assert client.put("/api/admin/bookings/missing/approve", headers=admin_headers).status_code == 404


class TestAdminListing:
    def test_filters(self, client, api_resource, admin_headers, student_headers, other_student_headers):
        def book(headers, booking_date, start, end):
            return client.post(
                "/api/bookings",
                json={
                    "resource_id": api_resource["id"],
                    "booking_date": booking_date,
                    "start_time": start,
                    "end_time": end,
                },
                headers=headers,
            ).json()

        first = book(student_headers, MONDAY, "09:00", "10:00")
        second = book(other_student_headers, MONDAY, "10:00", "11:00")
        third = book(student_headers, TUESDAY, "09:00", "10:00")
        client.put(f"/api/admin/bookings/{second['id']}/approve", headers=admin_headers)

        everything = client.get("/api/admin/bookings", headers=admin_headers).json()
        assert [b["id"] for b in everything] == [third["id"], second["id"], first["id"]]

        approved = client.get("/api/admin/bookings?status=approved", headers=admin_headers).json()
        assert [b["id"] for b in approved] == [second["id"]]

        by_user = client.get("/api/admin/bookings?user_id=student-1", headers=admin_headers).json()
        assert {b["id"] for b in by_user} == {first["id"], third["id"]}

        monday = client.get(
            f"/api/admin/bookings?date_from={MONDAY}&date_to={MONDAY}", headers=admin_headers
        ).json()
        assert {b["id"] for b in monday} == {first["id"], second["id"]}

    def test_listing_requires_admin(self, client, student_headers):
        response = client.get("/api/admin/bookings", headers=student_headers)
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "ADMIN_REQUIRED"

    def test_bad_date_range(self, client, admin_headers):
        response = client.get(
            f"/api/admin/bookings?date_from={TUESDAY}&date_to={MONDAY}", headers=admin_headers
        )
        assert response.status_code == 400


class TestBlocking:
    def test_block_and_unblock(self, client, api_resource, admin_headers):
        url = f"/api/admin/resources/{api_resource['id']}/block"
        assert client.put(url, json={"is_blocked": True}, headers=admin_headers).json()["is_blocked"] is True
        assert client.put(url, json={"is_blocked": False}, headers=admin_headers).json()["is_blocked"] is False

    def test_block_unknown_resource(self, client, admin_headers):
        response = client.put(
            "/api/admin/resources/missing/block", json={"is_blocked": True}, headers=admin_headers
        )
        assert response.status_code == 404
