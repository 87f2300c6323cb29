"""
Database models for the reservations platform.

- Resource: bookable rooms, labs and equipment
- AvailabilityRule: weekly templates and date exceptions per resource
- Booking: a reservation of one resource for one time window
"""

from .availability import AvailabilityRule
from .booking import ACTIVE_STATUSES, TERMINAL_STATUSES, Booking, BookingStatus
from .resource import Resource, ResourceType

__all__ = [
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "AvailabilityRule",
    "Booking",
    "BookingStatus",
    "Resource",
    "ResourceType",
]
