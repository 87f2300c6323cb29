"""
Booking decision pipeline.

Pure functions: callers load the resource, its availability rules and the
active bookings for the date (inside the locked transaction) and pass them
in. Each stage returns a RejectionReason or None; the first refusal wins.

    gate (blocked?) -> schedule (exceptions, weekly rules) -> conflicts
"""

from dataclasses import dataclass, field
from datetime import date
import logging
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence, Tuple

from ..core.enums import RejectionReason
from ..core.exceptions import BookingConflictException, ResourceUnavailableException
from .slot import TimeSlot, format_hhmm

if TYPE_CHECKING:
    from ..core.config import Settings
    from ..models.availability import AvailabilityRule
    from ..models.booking import Booking
    from ..models.resource import Resource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingPolicy:
    """Configurable booking rules."""

    initial_status: str = "approved"
    open_when_unscheduled: bool = True
    reject_past_dates: bool = True

    @classmethod
    def from_settings(cls, settings: "Settings") -> "BookingPolicy":
        return cls(
            initial_status=settings.initial_booking_status,
            open_when_unscheduled=settings.open_when_unscheduled,
            reject_past_dates=settings.reject_past_dates,
        )


@dataclass(frozen=True)
class BookingDecision:
    allowed: bool
    reason: Optional[RejectionReason] = None
    conflicts: List[dict] = field(default_factory=list)

    @classmethod
    def allow(cls) -> "BookingDecision":
        return cls(True)

    @classmethod
    def refuse(cls, reason: RejectionReason, conflicts: Optional[List[dict]] = None) -> "BookingDecision":
        return cls(False, reason, conflicts or [])

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "reason": self.reason.value if self.reason else None,
            "conflicts": self.conflicts,
        }


def check_gate(resource: "Resource") -> Optional[RejectionReason]:
    if resource.is_blocked:
        return RejectionReason.RESOURCE_BLOCKED
    return None


def _window(rule: "AvailabilityRule") -> Optional[Tuple[Any, Any]]:
    if rule.start_time is None or rule.end_time is None:
        return None
    return (rule.start_time, rule.end_time)


def _closed_by(slot: TimeSlot, rules: Sequence["AvailabilityRule"]) -> bool:
    """True if an unavailable rule closes the whole day or overlaps the slot."""
    for rule in rules:
        if rule.is_available:
            continue
        window = _window(rule)
        if window is None or slot.overlaps_window(*window):
            return True
    return False


def _granted_by(slot: TimeSlot, rules: Sequence["AvailabilityRule"]) -> Optional[bool]:
    """
    Whether the available rules cover the slot.

    None means the rules grant nothing at all; a windowless available rule
    covers the whole day, otherwise the slot must fit in the merged windows.
    """
    granting = [rule for rule in rules if rule.is_available]
    if not granting:
        return None
    if any(_window(rule) is None for rule in granting):
        return True
    return slot.within_any(_window(rule) for rule in granting)


def check_schedule(
    slot: TimeSlot,
    rules: Iterable["AvailabilityRule"],
    *,
    open_when_unscheduled: bool = True,
) -> Optional[RejectionReason]:
    """
    Exceptions for the date take precedence over the weekly template.

    1. a blackout exception, or a windowless unavailable one -> blackout_date
    2. an unavailable exception window overlapping the slot -> outside_schedule
    3. available exceptions decide alone: the slot must fit their windows
    4. otherwise weekly rules for the weekday: closures first, then the slot
       must fit an available window
    5. no rule for the day at all -> ``open_when_unscheduled``
    """
    rules = list(rules)
    exceptions = [r for r in rules if r.exception_date == slot.booking_date]
    weekly = [
        r for r in rules if r.exception_date is None and r.day_of_week == slot.day_of_week
    ]

    if exceptions:
        for rule in exceptions:
            if rule.is_blackout or (not rule.is_available and _window(rule) is None):
                return RejectionReason.BLACKOUT_DATE
        if _closed_by(slot, exceptions):
            return RejectionReason.OUTSIDE_SCHEDULE
        granted = _granted_by(slot, exceptions)
        if granted is not None:
            return None if granted else RejectionReason.OUTSIDE_SCHEDULE
        # Only partial closures for the date; the weekly template covers the rest.

    if weekly:
        if _closed_by(slot, weekly):
            return RejectionReason.OUTSIDE_SCHEDULE
        if not _granted_by(slot, weekly):
            return RejectionReason.OUTSIDE_SCHEDULE
        return None

    return None if open_when_unscheduled else RejectionReason.OUTSIDE_SCHEDULE


def find_conflicts(
    slot: TimeSlot,
    bookings: Iterable["Booking"],
    exclude_booking_id: Optional[str] = None,
) -> List[dict]:
    conflicts = []
    for booking in bookings:
        if exclude_booking_id and booking.id == exclude_booking_id:
            continue
        if not booking.is_active or booking.booking_date != slot.booking_date:
            continue
        if slot.overlaps_window(booking.start_time, booking.end_time):
            conflicts.append(
                {
                    "booking_id": booking.id,
                    "start_time": format_hhmm(booking.start_time),
                    "end_time": format_hhmm(booking.end_time),
                    "status": booking.status,
                }
            )
    return conflicts


def check_conflicts(
    slot: TimeSlot,
    bookings: Iterable["Booking"],
    exclude_booking_id: Optional[str] = None,
) -> Optional[RejectionReason]:
    if find_conflicts(slot, bookings, exclude_booking_id):
        return RejectionReason.TIME_CONFLICT
    return None


def evaluate_booking_request(
    resource: "Resource",
    slot: TimeSlot,
    rules: Iterable["AvailabilityRule"],
    bookings: Iterable["Booking"],
    *,
    policy: BookingPolicy = BookingPolicy(),
    exclude_booking_id: Optional[str] = None,
) -> BookingDecision:
    """Run gate, schedule and conflict checks in order."""
    reason = check_gate(resource)
    if reason is not None:
        return BookingDecision.refuse(reason)

    reason = check_schedule(slot, rules, open_when_unscheduled=policy.open_when_unscheduled)
    if reason is not None:
        return BookingDecision.refuse(reason)

    conflicts = find_conflicts(slot, bookings, exclude_booking_id)
    if conflicts:
        return BookingDecision.refuse(RejectionReason.TIME_CONFLICT, conflicts)

    return BookingDecision.allow()


def raise_for_decision(decision: BookingDecision, slot: TimeSlot, resource_id: str) -> None:
    """Turn a refused decision into the matching domain exception."""
    if decision.allowed:
        return
    details = {
        "resource_id": resource_id,
        "booking_date": slot.booking_date.isoformat(),
        "start_time": format_hhmm(slot.start_time),
        "end_time": format_hhmm(slot.end_time),
    }
    if decision.reason == RejectionReason.TIME_CONFLICT:
        raise BookingConflictException(details={**details, "conflicts": decision.conflicts})
    assert decision.reason is not None
    raise ResourceUnavailableException(decision.reason, details=details)


def is_past_date(booking_date: date, today: Optional[date] = None) -> bool:
    return booking_date < (today or date.today())
