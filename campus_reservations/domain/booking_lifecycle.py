"""
Booking lifecycle state machine.

Transitions are table driven; each event names the statuses it may fire
from and the status it leads to. Actor rules sit next to the table so the
booking service and the ORM model share one source of truth.

    pending  --approve-->  approved
    pending  --reject--->  rejected     approved --reject--> rejected
    pending | approved | rejected --cancel-->   cancelled
    pending | approved | rejected --complete--> completed
"""

from enum import Enum
from typing import Dict, FrozenSet, NamedTuple

from ..core.exceptions import ForbiddenException, InvalidTransitionException
from ..models.booking import ACTIVE_STATUSES, TERMINAL_STATUSES, BookingStatus
from ..principal import Principal


class BookingEvent(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    COMPLETE = "complete"


class Transition(NamedTuple):
    sources: FrozenSet[BookingStatus]
    target: BookingStatus


TRANSITIONS: Dict[BookingEvent, Transition] = {
    BookingEvent.APPROVE: Transition(frozenset({BookingStatus.PENDING}), BookingStatus.APPROVED),
    BookingEvent.REJECT: Transition(
        frozenset({BookingStatus.PENDING, BookingStatus.APPROVED}), BookingStatus.REJECTED
    ),
    BookingEvent.CANCEL: Transition(
        frozenset({BookingStatus.PENDING, BookingStatus.APPROVED, BookingStatus.REJECTED}),
        BookingStatus.CANCELLED,
    ),
    BookingEvent.COMPLETE: Transition(
        frozenset({BookingStatus.PENDING, BookingStatus.APPROVED, BookingStatus.REJECTED}),
        BookingStatus.COMPLETED,
    ),
}

_PAST_TENSE = {
    BookingEvent.APPROVE: "approved",
    BookingEvent.REJECT: "rejected",
    BookingEvent.CANCEL: "cancelled",
    BookingEvent.COMPLETE: "completed",
}


def _transition_error(current: BookingStatus, event: BookingEvent) -> InvalidTransitionException:
    if current == TRANSITIONS[event].target:
        message = f"Booking is already {current.value}"
    elif current in TERMINAL_STATUSES:
        message = f"Cannot {event.value} a {current.value} booking"
    else:
        message = f"Booking cannot be {_PAST_TENSE[event]} while {current.value}"
    return InvalidTransitionException(message, current_status=current.value, event=event.value)


def can_transition(current: str, event: BookingEvent) -> bool:
    return BookingStatus(current) in TRANSITIONS[event].sources


def next_status(current: str, event: BookingEvent) -> BookingStatus:
    """Return the status ``event`` leads to, or raise InvalidTransitionException."""
    status = BookingStatus(current)
    transition = TRANSITIONS[event]
    if status not in transition.sources:
        raise _transition_error(status, event)
    return transition.target


def authorize_event(event: BookingEvent, actor: Principal, owner_id: str) -> None:
    """
    Enforce who may fire ``event``.

    Approve and reject are admin actions; cancel is open to the owner and to
    admins; completion is driven by admins or the system clock.
    """
    if event in (BookingEvent.APPROVE, BookingEvent.REJECT):
        allowed = actor.is_admin
    elif event == BookingEvent.CANCEL:
        allowed = actor.is_admin or actor.id == owner_id
    else:
        allowed = actor.is_admin or actor.is_system
    if not allowed:
        raise ForbiddenException(
            f"You are not allowed to {event.value} this booking",
            code="FORBIDDEN",
            details={"event": event.value, "actor_id": actor.id},
        )


def is_editable(current: str) -> bool:
    return BookingStatus(current) in ACTIVE_STATUSES


def authorize_edit(current: str, actor: Principal, owner_id: str) -> None:
    """Only the owner edits, and only while the booking is active."""
    if actor.id != owner_id:
        raise ForbiddenException(
            "You can only update your own bookings",
            code="FORBIDDEN",
            details={"actor_id": actor.id},
        )
    if not is_editable(current):
        raise InvalidTransitionException(
            f"Cannot update a {current} booking", current_status=current, event="update"
        )
