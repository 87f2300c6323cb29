# tests/services/test_resource_service.py
"""
Tests for ResourceService: admin management, blocking and delete guard.
"""

from datetime import date, time

import pytest

from campus_reservations.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    ResourceInUseException,
    ValidationException,
)
from campus_reservations.models.availability import AvailabilityRule
from campus_reservations.models.booking import Booking
from campus_reservations.models.resource import Resource
from campus_reservations.services.resource_service import ResourceService

MONDAY = date(2024, 6, 10)


@pytest.fixture
def service(db):
    return ResourceService(db)


class TestResourceManagement:
    def test_create_resource(self, service, admin):
        resource = service.create_resource(
            {"name": "LAB 2", "type": "lab", "location": "B Building", "capacity": 30}, admin
        )
        assert resource.id
        assert resource.type == "lab"
        assert resource.is_blocked is False

    def test_create_requires_admin(self, service, student):
        with pytest.raises(ForbiddenException) as exc_info:
            service.create_resource({"name": "X", "type": "room", "location": "Y"}, student)
        assert exc_info.value.code == "ADMIN_REQUIRED"

    def test_create_requires_fields(self, service, admin):
        with pytest.raises(ValidationException) as exc_info:
            service.create_resource({"name": "X", "type": "room"}, admin)
        assert exc_info.value.message == "Name, type, and location are required"

    def test_create_rejects_unknown_type(self, service, admin):
        with pytest.raises(ValidationException):
            service.create_resource({"name": "X", "type": "auditorium", "location": "Y"}, admin)

    def test_update_resource(self, service, resource, admin):
        updated = service.update_resource(resource.id, {"capacity": 10, "name": "Renamed"}, admin)
        assert updated.capacity == 10
        assert updated.name == "Renamed"

    def test_update_without_fields(self, service, resource, admin):
        with pytest.raises(ValidationException):
            service.update_resource(resource.id, {"id": "other"}, admin)

    def test_update_cannot_clear_required_fields(self, db, service, resource, admin):
        with pytest.raises(ValidationException) as exc_info:
            service.update_resource(resource.id, {"name": None, "location": None}, admin)
        assert exc_info.value.details == {"fields": ["location", "name"]}
        db.expire_all()
        assert db.get(Resource, resource.id).name == "Study Room 1"

    def test_update_unknown_resource(self, service, admin):
        with pytest.raises(NotFoundException):
            service.update_resource("missing", {"name": "X"}, admin)

    def test_get_unknown_resource(self, service):
        with pytest.raises(NotFoundException) as exc_info:
            service.get_resource("missing")
        assert exc_info.value.code == "RESOURCE_NOT_FOUND"


class TestListResources:
    @pytest.fixture
    def catalog(self, make_resource):
        return [
            make_resource(name="Study Room 1", resource_type="room", location="Library"),
            make_resource(name="LAB 1", resource_type="lab", location="H Building"),
            make_resource(
                name="Projector Kit", resource_type="equipment", location="Library", is_blocked=True
            ),
        ]

    def test_ordered_by_type_then_name(self, service, catalog):
        assert [r.name for r in service.list_resources()] == ["Projector Kit", "LAB 1", "Study Room 1"]

    def test_filters(self, service, catalog):
        assert [r.name for r in service.list_resources(resource_type="lab")] == ["LAB 1"]
        assert [r.name for r in service.list_resources(location="library")] == [
            "Projector Kit",
            "Study Room 1",
        ]
        assert [r.name for r in service.list_resources(search="projector")] == ["Projector Kit"]
        assert "Projector Kit" not in [r.name for r in service.list_resources(include_blocked=False)]

    def test_invalid_type_filter(self, service):
        with pytest.raises(ValidationException):
            service.list_resources(resource_type="spaceship")


class TestBlocking:
    def test_block_and_unblock(self, service, resource, admin):
        assert service.set_blocked(resource.id, True, admin).is_blocked is True
        assert service.set_blocked(resource.id, False, admin).is_blocked is False

    def test_blocking_keeps_existing_bookings(self, db, service, resource, admin, make_booking):
        booking = make_booking(resource.id, time(9), time(10))
        service.set_blocked(resource.id, True, admin)
        assert db.get(Booking, booking.id).status == "approved"

    def test_block_requires_admin(self, service, resource, student):
        with pytest.raises(ForbiddenException):
            service.set_blocked(resource.id, True, student)


class TestDeleteResource:
    def test_delete_with_active_booking_is_refused(self, service, resource, admin, make_booking):
        make_booking(resource.id, time(9), time(10), status="pending")
        with pytest.raises(ResourceInUseException) as exc_info:
            service.delete_resource(resource.id, admin)
        assert exc_info.value.details["active_bookings"] == 1

    def test_delete_removes_history_and_rules(self, db, service, resource, admin, make_booking, make_rule):
        make_booking(resource.id, time(9), time(10), status="cancelled")
        make_rule(resource.id, day_of_week=1, start=time(9), end=time(17))
        resource_id = resource.id

        service.delete_resource(resource_id, admin)

        assert db.get(Resource, resource_id) is None
        assert db.query(Booking).filter(Booking.resource_id == resource_id).count() == 0
        assert db.query(AvailabilityRule).filter(AvailabilityRule.resource_id == resource_id).count() == 0

    def test_delete_unknown_resource(self, service, admin):
        with pytest.raises(NotFoundException):
            service.delete_resource("missing", admin)
