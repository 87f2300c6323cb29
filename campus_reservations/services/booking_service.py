# campus_reservations/services/booking_service.py
"""
Booking Service for the reservations platform.

Handles all booking-related business logic including:
- Creating bookings through the gate, schedule and conflict pipeline
- Editing the time window or purpose of an active booking
- Lifecycle transitions (approve, reject, cancel, complete)
- Owner and admin listings

Every create or time change runs as:

    slot lock (resource, date) -> transaction -> resource row lock
        -> load rules and active bookings -> decide -> write -> commit

so two requests for the same resource and date are serialized and the
decision is never based on stale data. On PostgreSQL the
``bookings_no_overlap_per_resource`` exclusion constraint backs this up;
its violation is reported as a BookingConflictException.
"""

from contextlib import contextmanager
from datetime import date, datetime, time
import logging
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.booking_lock import SlotLocker, default_slot_locker, slot_lock_key
from ..core.enums import RejectionReason
from ..core.exceptions import (
    BookingConflictException,
    ForbiddenException,
    NotFoundException,
    ServiceException,
    SlotBusyException,
    ValidationException,
)
from ..domain.booking_lifecycle import (
    BookingEvent,
    authorize_edit,
    authorize_event,
)
from ..domain.decisions import (
    BookingDecision,
    BookingPolicy,
    evaluate_booking_request,
    is_past_date,
    raise_for_decision,
)
from ..domain.slot import TimeSlot, format_hhmm
from ..models.booking import Booking, BookingStatus
from ..models.resource import Resource
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import Principal
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

OVERLAP_CONSTRAINT = "bookings_no_overlap_per_resource"

_SCHEDULE_FIELDS = ("booking_date", "start_time", "end_time")
_EDITABLE_FIELDS = _SCHEDULE_FIELDS + ("purpose",)


class BookingService(BaseService):
    """
    Service layer for booking operations.

    The session, policy and slot locker are injected; services sharing a
    process must share one SlotLocker so their local locks agree.
    """

    def __init__(
        self,
        db: Session,
        policy: Optional[BookingPolicy] = None,
        slot_locker: Optional[SlotLocker] = None,
    ):
        super().__init__(db)
        self.policy = policy or BookingPolicy()
        self.slot_locker = slot_locker or default_slot_locker()
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.resource_repository = RepositoryFactory.create_resource_repository(db)
        self.rule_repository = RepositoryFactory.create_availability_rule_repository(db)
        self.conflict_repository = RepositoryFactory.create_conflict_checker_repository(db)

    # Helpers

    def _today(self) -> date:
        return date.today()

    def _check_not_past(self, slot: TimeSlot) -> None:
        if self.policy.reject_past_dates and is_past_date(slot.booking_date, self._today()):
            raise ValidationException(
                "Cannot book resources in the past",
                details={"booking_date": slot.booking_date.isoformat()},
            )

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if not booking:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
        return booking

    def _lock_booking(self, booking_id: str) -> Booking:
        booking = self.repository.get_for_update(booking_id)
        if not booking:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
        return booking

    def _lock_resource(self, resource_id: str) -> Resource:
        resource = self.resource_repository.get_for_update(resource_id)
        if not resource:
            raise NotFoundException("Resource not found", code="RESOURCE_NOT_FOUND")
        return resource

    def _decide(
        self, resource: Resource, slot: TimeSlot, exclude_booking_id: Optional[str] = None
    ) -> BookingDecision:
        rules = self.rule_repository.get_rules_for_date(
            resource.id, slot.booking_date, slot.day_of_week
        )
        bookings = self.conflict_repository.get_bookings_for_conflict_check(
            resource.id, slot.booking_date, exclude_booking_id
        )
        decision = evaluate_booking_request(
            resource,
            slot,
            rules,
            bookings,
            policy=self.policy,
            exclude_booking_id=exclude_booking_id,
        )
        prometheus_metrics.record_booking_decision(
            decision.allowed, decision.reason.value if decision.reason else None
        )
        if not decision.allowed:
            self.logger.warning(
                f"Booking request refused for resource {resource.id} at {slot}: "
                f"{decision.reason.value if decision.reason else 'unknown'}"
            )
        return decision

    @contextmanager
    def _overlap_guard(self, resource_id: str, slot: TimeSlot) -> Iterator[None]:
        """Report the database overlap constraint as a booking conflict."""
        try:
            yield
        except IntegrityError as exc:
            if OVERLAP_CONSTRAINT in str(exc.orig):
                prometheus_metrics.record_booking_decision(
                    False, RejectionReason.TIME_CONFLICT.value
                )
                self.logger.warning(
                    f"Overlap constraint rejected booking for resource {resource_id} at {slot}"
                )
                raise BookingConflictException(
                    details={
                        "resource_id": resource_id,
                        "booking_date": slot.booking_date.isoformat(),
                        "start_time": format_hhmm(slot.start_time),
                        "end_time": format_hhmm(slot.end_time),
                    }
                ) from exc
            raise ServiceException(f"Database operation failed: {str(exc.orig)}") from exc

    # Creation and edits

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        actor: Principal,
        resource_id: str,
        booking_date: date,
        start_time: time,
        end_time: time,
        purpose: Optional[str] = None,
    ) -> Booking:
        """
        Create a booking for ``actor``.

        Raises:
            ValidationException: end <= start, or a past date
            NotFoundException: unknown resource
            ResourceUnavailableException: blocked, outside schedule or blackout
            BookingConflictException: overlaps an active booking
        """
        slot = TimeSlot(booking_date, start_time, end_time)
        self._check_not_past(slot)

        with self._overlap_guard(resource_id, slot):
            with self.slot_locker.hold(resource_id, slot.booking_date):
                with self.transaction():
                    resource = self._lock_resource(resource_id)
                    decision = self._decide(resource, slot)
                    raise_for_decision(decision, slot, resource_id)

                    booking = self.repository.create(
                        user_id=actor.id,
                        resource_id=resource_id,
                        booking_date=slot.booking_date,
                        start_time=slot.start_time,
                        end_time=slot.end_time,
                        purpose=purpose,
                        status=self.policy.initial_status,
                    )

        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            resource_id=resource_id,
            user_id=actor.id,
            slot=str(slot),
            status=booking.status,
        )
        return booking

    @BaseService.measure_operation("update_booking")
    def update_booking(self, booking_id: str, actor: Principal, changes: Dict[str, Any]) -> Booking:
        """
        Edit an active booking owned by ``actor``.

        ``changes`` may hold booking_date, start_time, end_time and purpose.
        Any change to the time window re-runs the full decision pipeline,
        excluding the booking itself from the conflict check.
        """
        changes = {
            key: value
            for key, value in changes.items()
            if key in _EDITABLE_FIELDS and (key == "purpose" or value is not None)
        }
        if not changes:
            raise ValidationException("No fields to update")

        booking = self._get_booking(booking_id)
        authorize_edit(booking.status, actor, booking.user_id)

        reschedule = any(key in changes for key in _SCHEDULE_FIELDS)
        if not reschedule:
            with self.transaction():
                booking = self._lock_booking(booking_id)
                authorize_edit(booking.status, actor, booking.user_id)
                booking.purpose = changes["purpose"]
                booking.touch()
            self.log_operation("update_booking", booking_id=booking_id, fields=["purpose"])
            return booking

        resource_id = booking.resource_id
        locked_dates = {booking.booking_date, changes.get("booking_date") or booking.booking_date}

        with self.slot_locker.hold(resource_id, *locked_dates):
            with self.transaction():
                # The slot is built from the row as it is under the lock, so an
                # edit committed while this request waited is not reverted.
                booking = self._lock_booking(booking_id)
                authorize_edit(booking.status, actor, booking.user_id)
                if booking.booking_date not in locked_dates:
                    raise SlotBusyException(slot_lock_key(resource_id, booking.booking_date))

                slot = TimeSlot(
                    booking.booking_date, booking.start_time, booking.end_time
                ).with_changes(
                    booking_date=changes.get("booking_date"),
                    start_time=changes.get("start_time"),
                    end_time=changes.get("end_time"),
                )
                self._check_not_past(slot)

                with self._overlap_guard(resource_id, slot):
                    resource = self._lock_resource(resource_id)
                    decision = self._decide(resource, slot, exclude_booking_id=booking.id)
                    raise_for_decision(decision, slot, resource.id)

                    booking.booking_date = slot.booking_date
                    booking.start_time = slot.start_time
                    booking.end_time = slot.end_time
                    if "purpose" in changes:
                        booking.purpose = changes["purpose"]
                    booking.touch()
                    self.repository.flush()

        self.log_operation(
            "update_booking", booking_id=booking_id, slot=str(slot), fields=sorted(changes)
        )
        return booking

    # Lifecycle transitions

    def _transition(
        self,
        booking_id: str,
        actor: Principal,
        event: BookingEvent,
        reason: Optional[str] = None,
    ) -> Booking:
        with self.transaction():
            booking = self._lock_booking(booking_id)
            authorize_event(event, actor, booking.user_id)

            if event == BookingEvent.APPROVE:
                booking.approve()
            elif event == BookingEvent.REJECT:
                booking.reject(reason)
            elif event == BookingEvent.CANCEL:
                booking.cancel(actor.id, reason)
            else:
                booking.complete()

        self.log_operation(
            f"{event.value}_booking",
            booking_id=booking_id,
            actor_id=actor.id,
            status=booking.status,
        )
        return booking

    @BaseService.measure_operation("approve_booking")
    def approve_booking(self, booking_id: str, actor: Principal) -> Booking:
        return self._transition(booking_id, actor, BookingEvent.APPROVE)

    @BaseService.measure_operation("reject_booking")
    def reject_booking(
        self, booking_id: str, actor: Principal, reason: Optional[str] = None
    ) -> Booking:
        return self._transition(booking_id, actor, BookingEvent.REJECT, reason)

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self, booking_id: str, actor: Principal, reason: Optional[str] = None
    ) -> Booking:
        return self._transition(booking_id, actor, BookingEvent.CANCEL, reason)

    @BaseService.measure_operation("complete_booking")
    def complete_booking(self, booking_id: str, actor: Principal) -> Booking:
        return self._transition(booking_id, actor, BookingEvent.COMPLETE)

    # Queries

    @BaseService.measure_operation("get_booking")
    def get_booking(self, booking_id: str, actor: Principal) -> Booking:
        booking = self._get_booking(booking_id)
        if not (actor.is_admin or booking.is_owned_by(actor.id)):
            raise ForbiddenException("Access denied", code="FORBIDDEN")
        return booking

    @BaseService.measure_operation("list_user_bookings")
    def list_user_bookings(
        self,
        actor: Principal,
        status: Optional[BookingStatus] = None,
        upcoming: bool = False,
    ) -> List[Booking]:
        """
        Bookings owned by ``actor``, newest first.

        ``upcoming`` keeps bookings that have not ended yet.
        """
        today = self._today()
        bookings = self.repository.get_user_bookings(
            actor.id,
            status=status.value if status else None,
            date_from=today if upcoming else None,
        )
        if upcoming:
            now = datetime.now()
            bookings = [b for b in bookings if b.is_upcoming(today, now)]
        return bookings

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self,
        actor: Principal,
        *,
        status: Optional[BookingStatus] = None,
        resource_id: Optional[str] = None,
        user_id: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Booking]:
        """Admin listing filtered by status, resource, user and date range."""
        if not actor.is_admin:
            raise ForbiddenException("Admin access required", code="ADMIN_REQUIRED")
        if date_from and date_to and date_from > date_to:
            raise ValidationException("date_from must not be after date_to")
        return self.repository.list_bookings(
            status=status.value if status else None,
            resource_id=resource_id,
            user_id=user_id,
            date_from=date_from,
            date_to=date_to,
            skip=skip,
            limit=limit,
        )

    @BaseService.measure_operation("check_availability")
    def check_availability(
        self,
        resource_id: str,
        booking_date: date,
        start_time: time,
        end_time: time,
        exclude_booking_id: Optional[str] = None,
    ) -> BookingDecision:
        """
        Dry run of the decision pipeline; nothing is locked or written.

        The answer can go stale as soon as it is returned; only
        create_booking and update_booking decide under the slot lock.
        """
        slot = TimeSlot(booking_date, start_time, end_time)
        resource = self.resource_repository.get_by_id(resource_id)
        if not resource:
            raise NotFoundException("Resource not found", code="RESOURCE_NOT_FOUND")
        return self._decide(resource, slot, exclude_booking_id=exclude_booking_id)
