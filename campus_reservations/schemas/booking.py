# campus_reservations/schemas/booking.py
"""
Booking schemas for the reservations platform.

Dates travel as ``YYYY-MM-DD`` and times as 24-hour ``HH:MM`` strings.
Whether ``end_time`` is after ``start_time`` is checked by the domain slot
model, so the API reports it with the same error as the service layer.
"""

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import Field, field_serializer, field_validator

from ..models.booking import BookingStatus
from ._strict_base import StrictModel, StrictRequestModel
from ._validators import ensure_date_only, ensure_hhmm, hhmm


class BookingCreate(StrictRequestModel):
    """Create a booking for the calling user."""

    resource_id: str = Field(..., min_length=1, description="Resource to book")
    booking_date: date = Field(..., description="Date of the booking")
    start_time: time = Field(..., description="Start time (HH:MM)")
    end_time: time = Field(..., description="End time (HH:MM), exclusive")
    purpose: Optional[str] = Field(None, max_length=1000)

    @field_validator("booking_date", mode="before")
    @classmethod
    def _validate_date(cls, value: object) -> object:
        return ensure_date_only(value, "date")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _validate_time(cls, value: object) -> object:
        return ensure_hhmm(value, "time")


class BookingUpdate(StrictRequestModel):
    """
    Partial edit of a booking.

    Only fields that are sent are applied; changing any of the date or times
    re-runs the availability and conflict checks.
    """

    booking_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    purpose: Optional[str] = Field(None, max_length=1000)

    @field_validator("booking_date", mode="before")
    @classmethod
    def _validate_date(cls, value: object) -> object:
        return ensure_date_only(value, "date")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _validate_time(cls, value: object) -> object:
        return ensure_hhmm(value, "time")


class AvailabilityCheckRequest(BookingCreate):
    """Dry-run request: the same fields as a booking plus an optional exclusion."""

    exclude_booking_id: Optional[str] = None


class BookingCancelRequest(StrictRequestModel):
    reason: Optional[str] = Field(None, max_length=500)


class BookingRejectRequest(StrictRequestModel):
    reason: Optional[str] = Field(None, max_length=500)


class BookingResponse(StrictModel):
    id: str
    user_id: str
    resource_id: str
    booking_date: date
    start_time: time
    end_time: time
    purpose: Optional[str] = None
    status: BookingStatus
    rejection_reason: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_by_id: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer("start_time", "end_time")
    def _serialize_time(self, value: time) -> Optional[str]:
        return hhmm(value)


class BookedTime(StrictModel):
    booking_id: str
    start_time: str
    end_time: str
    status: BookingStatus


class DayAvailabilityResponse(StrictModel):
    resource_id: str
    booking_date: date
    booked_times: List[BookedTime]


class ConflictInfo(StrictModel):
    booking_id: str
    start_time: str
    end_time: str
    status: BookingStatus


class BookingDecisionResponse(StrictModel):
    allowed: bool
    reason: Optional[str] = None
    conflicts: List[ConflictInfo] = Field(default_factory=list)

