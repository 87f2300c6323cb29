# campus_reservations/routes/bookings.py
"""
Booking routes.

Router Endpoints:
    POST / - Create a booking for the caller
    GET /my-bookings - Caller's bookings, optionally filtered
    GET /availability/{resource_id}?date= - Booked times for a day
    POST /check-availability - Dry run of the booking decision
    GET /{booking_id} - Booking details (owner or admin)
    PUT /{booking_id} - Edit date, times or purpose (owner)
    DELETE /{booking_id} - Cancel a booking (owner or admin)

Handlers are plain ``def`` functions: the service may wait on a slot lock,
so they run in FastAPI's threadpool rather than on the event loop.
"""

from datetime import date
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ..api.dependencies import (
    get_booking_service,
    get_conflict_checker,
    get_current_principal,
    get_resource_service,
)
from ..core.exceptions import DomainException
from ..domain.slot import DATE_ONLY_REGEX, parse_iso_date
from ..models.booking import BookingStatus
from ..principal import UserPrincipal
from ..schemas.booking import (
    AvailabilityCheckRequest,
    BookingCancelRequest,
    BookingCreate,
    BookingDecisionResponse,
    BookingResponse,
    BookingUpdate,
    DayAvailabilityResponse,
)
from ..services.booking_service import BookingService
from ..services.conflict_checker import ConflictChecker
from ..services.resource_service import ResourceService
from ._errors import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


# 1. First: all specific routes


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    booking_data: BookingCreate,
    current_user: UserPrincipal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Create a booking; the resource gate, schedule and conflicts are checked atomically."""
    try:
        booking = booking_service.create_booking(
            current_user,
            booking_data.resource_id,
            booking_data.booking_date,
            booking_data.start_time,
            booking_data.end_time,
            purpose=booking_data.purpose,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/my-bookings", response_model=List[BookingResponse])
def get_my_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    upcoming: bool = Query(False),
    current_user: UserPrincipal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        bookings = booking_service.list_user_bookings(
            current_user, status=status_filter, upcoming=upcoming
        )
        return [BookingResponse.model_validate(b) for b in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/availability/{resource_id}", response_model=DayAvailabilityResponse)
def get_booked_times(
    resource_id: str,
    date_param: str = Query(
        ...,
        alias="date",
        pattern=DATE_ONLY_REGEX.pattern,
        description="Date to inspect (YYYY-MM-DD)",
    ),
    resource_service: ResourceService = Depends(get_resource_service),
    conflict_checker: ConflictChecker = Depends(get_conflict_checker),
):
    """Active bookings of a resource on one day, ordered by start time."""
    try:
        target_date: date = parse_iso_date(date_param)
        resource_service.get_resource(resource_id)
        booked = conflict_checker.get_booked_times_for_date(resource_id, target_date)
        return DayAvailabilityResponse(
            resource_id=resource_id, booking_date=target_date, booked_times=booked
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/check-availability", response_model=BookingDecisionResponse)
def check_availability(
    check_data: AvailabilityCheckRequest,
    current_user: UserPrincipal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Report whether a booking would be accepted right now, without creating it."""
    try:
        decision = booking_service.check_availability(
            check_data.resource_id,
            check_data.booking_date,
            check_data.start_time,
            check_data.end_time,
            exclude_booking_id=check_data.exclude_booking_id,
        )
        return BookingDecisionResponse(**decision.to_dict())
    except DomainException as e:
        handle_domain_exception(e)


# 2. Finally: routes with path parameters


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking_details(
    booking_id: str,
    current_user: UserPrincipal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        return BookingResponse.model_validate(booking_service.get_booking(booking_id, current_user))
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/{booking_id}", response_model=BookingResponse)
def update_booking(
    booking_id: str,
    update_data: BookingUpdate,
    current_user: UserPrincipal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Edit an active booking (owner only)."""
    try:
        booking = booking_service.update_booking(
            booking_id, current_user, update_data.model_dump(exclude_unset=True)
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{booking_id}", response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    cancel_data: Optional[BookingCancelRequest] = Body(None),
    current_user: UserPrincipal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Cancel a booking (owner or admin)."""
    try:
        booking = booking_service.cancel_booking(
            booking_id, current_user, reason=cancel_data.reason if cancel_data else None
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)
