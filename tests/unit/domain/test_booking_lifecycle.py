"""Tests for the booking state machine and its actor rules."""

import pytest

from campus_reservations.core.enums import RoleName
from campus_reservations.core.exceptions import ForbiddenException, InvalidTransitionException
from campus_reservations.domain.booking_lifecycle import (
    BookingEvent,
    authorize_edit,
    authorize_event,
    can_transition,
    is_editable,
    next_status,
)
from campus_reservations.models.booking import BookingStatus
from campus_reservations.principal import SystemPrincipal, UserPrincipal

ADMIN = UserPrincipal("admin-1", RoleName.ADMIN)
OWNER = UserPrincipal("student-1")
STRANGER = UserPrincipal("student-2")
STAFF = UserPrincipal("staff-1", RoleName.STAFF)
SYSTEM = SystemPrincipal()


@pytest.mark.unit
class TestTransitions:
    @pytest.mark.parametrize(
        "current, event, expected",
        [
            ("pending", BookingEvent.APPROVE, BookingStatus.APPROVED),
            ("pending", BookingEvent.REJECT, BookingStatus.REJECTED),
            ("approved", BookingEvent.REJECT, BookingStatus.REJECTED),
            ("pending", BookingEvent.CANCEL, BookingStatus.CANCELLED),
            ("approved", BookingEvent.CANCEL, BookingStatus.CANCELLED),
            ("rejected", BookingEvent.CANCEL, BookingStatus.CANCELLED),
            ("approved", BookingEvent.COMPLETE, BookingStatus.COMPLETED),
            ("rejected", BookingEvent.COMPLETE, BookingStatus.COMPLETED),
        ],
    )
    def test_allowed_transitions(self, current, event, expected):
        assert can_transition(current, event)
        assert next_status(current, event) == expected

    @pytest.mark.parametrize(
        "current, event, message",
        [
            ("rejected", BookingEvent.APPROVE, "Booking cannot be approved while rejected"),
            ("approved", BookingEvent.APPROVE, "Booking is already approved"),
            ("rejected", BookingEvent.REJECT, "Booking is already rejected"),
            ("completed", BookingEvent.CANCEL, "Cannot cancel a completed booking"),
            ("cancelled", BookingEvent.CANCEL, "Booking is already cancelled"),
            ("cancelled", BookingEvent.COMPLETE, "Cannot complete a cancelled booking"),
            ("completed", BookingEvent.COMPLETE, "Booking is already completed"),
            ("cancelled", BookingEvent.APPROVE, "Cannot approve a cancelled booking"),
        ],
    )
    def test_invalid_transitions(self, current, event, message):
        assert not can_transition(current, event)
        with pytest.raises(InvalidTransitionException) as exc_info:
            next_status(current, event)
        assert exc_info.value.message == message
        assert exc_info.value.code == "INVALID_TRANSITION"
        assert exc_info.value.details == {"current_status": current, "event": event.value}

    def test_terminal_statuses_have_no_exit(self):
        for current in ("cancelled", "completed"):
            for event in BookingEvent:
                assert not can_transition(current, event)


@pytest.mark.unit
class TestActorRules:
    @pytest.mark.parametrize("event", [BookingEvent.APPROVE, BookingEvent.REJECT])
    def test_review_is_admin_only(self, event):
        authorize_event(event, ADMIN, OWNER.id)
        for actor in (OWNER, STAFF, SYSTEM):
            with pytest.raises(ForbiddenException):
                authorize_event(event, actor, OWNER.id)

    def test_cancel_by_owner_or_admin(self):
        authorize_event(BookingEvent.CANCEL, OWNER, OWNER.id)
        authorize_event(BookingEvent.CANCEL, ADMIN, OWNER.id)
        with pytest.raises(ForbiddenException) as exc_info:
            authorize_event(BookingEvent.CANCEL, STRANGER, OWNER.id)
        assert exc_info.value.details["event"] == "cancel"

    def test_complete_by_admin_or_system(self):
        authorize_event(BookingEvent.COMPLETE, ADMIN, OWNER.id)
        authorize_event(BookingEvent.COMPLETE, SYSTEM, OWNER.id)
        with pytest.raises(ForbiddenException):
            authorize_event(BookingEvent.COMPLETE, OWNER, OWNER.id)


@pytest.mark.unit
class TestEditRules:
    @pytest.mark.parametrize("current", ["pending", "approved"])
    def test_owner_edits_active_booking(self, current):
        assert is_editable(current)
        authorize_edit(current, OWNER, OWNER.id)

    @pytest.mark.parametrize("current", ["rejected", "cancelled", "completed"])
    def test_inactive_booking_is_frozen(self, current):
        assert not is_editable(current)
        with pytest.raises(InvalidTransitionException) as exc_info:
            authorize_edit(current, OWNER, OWNER.id)
        assert exc_info.value.message == f"Cannot update a {current} booking"

    def test_admin_cannot_edit_someone_elses_booking(self):
        with pytest.raises(ForbiddenException) as exc_info:
            authorize_edit("approved", ADMIN, OWNER.id)
        assert exc_info.value.message == "You can only update your own bookings"
