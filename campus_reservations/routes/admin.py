# campus_reservations/routes/admin.py
"""
Admin routes: booking review and resource blocking.

Every endpoint requires the ``admin`` role.
"""

from datetime import date
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..api.dependencies import get_booking_service, get_resource_service, require_admin
from ..core.exceptions import DomainException
from ..models.booking import BookingStatus
from ..principal import UserPrincipal
from ..schemas.booking import BookingRejectRequest, BookingResponse
from ..schemas.resource import ResourceBlockRequest, ResourceResponse
from ..services.booking_service import BookingService
from ..services.resource_service import ResourceService
from ._errors import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/bookings", response_model=List[BookingResponse])
def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    resource_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: UserPrincipal = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        bookings = booking_service.list_bookings(
            current_user,
            status=status_filter,
            resource_id=resource_id,
            user_id=user_id,
            date_from=date_from,
            date_to=date_to,
            skip=skip,
            limit=limit,
        )
        return [BookingResponse.model_validate(b) for b in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/bookings/{booking_id}/approve", response_model=BookingResponse)
def approve_booking(
    booking_id: str,
    current_user: UserPrincipal = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        return BookingResponse.model_validate(booking_service.approve_booking(booking_id, current_user))
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/bookings/{booking_id}/reject", response_model=BookingResponse)
def reject_booking(
    booking_id: str,
    reject_data: Optional[BookingRejectRequest] = Body(None),
    current_user: UserPrincipal = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        booking = booking_service.reject_booking(
            booking_id, current_user, reason=reject_data.reason if reject_data else None
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/bookings/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(
    booking_id: str,
    current_user: UserPrincipal = Depends(require_admin),
    booking_service: BookingService = Depends(get_booking_service),
):
    try:
        return BookingResponse.model_validate(booking_service.complete_booking(booking_id, current_user))
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/resources/{resource_id}/block", response_model=ResourceResponse)
def set_resource_blocked(
    resource_id: str,
    block_data: ResourceBlockRequest,
    current_user: UserPrincipal = Depends(require_admin),
    resource_service: ResourceService = Depends(get_resource_service),
):
    """Block or unblock a resource; existing bookings are left untouched."""
    try:
        resource = resource_service.set_blocked(resource_id, block_data.is_blocked, current_user)
        return ResourceResponse.model_validate(resource)
    except DomainException as e:
        handle_domain_exception(e)
