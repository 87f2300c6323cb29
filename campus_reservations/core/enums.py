# campus_reservations/core/enums.py
"""
Core enums for the reservations platform.

Role names are supplied by the upstream identity provider with every request;
rejection reasons are the tags the scheduling core attaches to a refused
booking decision.
"""

from enum import Enum


class RoleName(str, Enum):
    """
    Standard role names.

    Students and staff book resources for themselves; admins manage resources,
    schedules and approve or reject bookings.
    """

    ADMIN = "admin"
    STAFF = "staff"
    STUDENT = "student"


class RejectionReason(str, Enum):
    """Why a booking request was refused by the scheduling core."""

    RESOURCE_BLOCKED = "resource_blocked"
    OUTSIDE_SCHEDULE = "outside_schedule"
    BLACKOUT_DATE = "blackout_date"
    TIME_CONFLICT = "time_conflict"
