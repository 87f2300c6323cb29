# campus_reservations/services/conflict_checker.py
"""
Conflict Checker Service for the reservations platform.

Detects overlap between a requested time range and the pending or
approved bookings of a resource on the same date. Ranges are half-open,
so back-to-back bookings never conflict.

Checks are read-only. For the result to stay valid until the write that
follows, BookingService calls them inside its locked transaction.
"""

from datetime import date, time
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..domain.decisions import find_conflicts
from ..domain.slot import TimeSlot, format_hhmm
from ..repositories import RepositoryFactory
from ..repositories.conflict_checker_repository import ConflictCheckerRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class ConflictChecker(BaseService):
    """Service for checking booking conflicts on a resource."""

    def __init__(self, db: Session, repository: Optional[ConflictCheckerRepository] = None):
        """
        Initialize conflict checker service.

        Args:
            db: Database session
            repository: Optional ConflictCheckerRepository instance
        """
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_conflict_checker_repository(db)

    @BaseService.measure_operation("check_booking_conflicts")
    def check_booking_conflicts(
        self,
        resource_id: str,
        check_date: date,
        start_time: time,
        end_time: time,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Check if a time range conflicts with existing bookings.

        Args:
            resource_id: The resource to check
            check_date: The date to check
            start_time: Start time of the range to check
            end_time: End time of the range to check
            exclude_booking_id: Optional booking ID to exclude from check

        Returns:
            List of conflicts with booking details
        """
        slot = TimeSlot(check_date, start_time, end_time)
        bookings = self.repository.get_bookings_for_conflict_check(
            resource_id, check_date, exclude_booking_id
        )
        conflicts = find_conflicts(slot, bookings, exclude_booking_id)

        if conflicts:
            self.logger.warning(
                f"Found {len(conflicts)} booking conflicts for resource {resource_id} "
                f"on {check_date} between {format_hhmm(start_time)}-{format_hhmm(end_time)}"
            )

        return conflicts

    def has_conflict(
        self,
        resource_id: str,
        booking_date: date,
        start_time: time,
        end_time: time,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """True iff an active booking of the resource overlaps the range."""
        conflicts = self.check_booking_conflicts(
            resource_id, booking_date, start_time, end_time, exclude_booking_id
        )
        return len(conflicts) > 0

    @BaseService.measure_operation("get_booked_times_date")
    def get_booked_times_for_date(self, resource_id: str, target_date: date) -> List[Dict[str, Any]]:
        """
        Get all booked time ranges for a resource on a specific date.

        Returns:
            Active bookings ordered by start time
        """
        bookings = self.repository.get_bookings_for_date(resource_id, target_date)

        return [
            {
                "booking_id": booking.id,
                "start_time": format_hhmm(booking.start_time),
                "end_time": format_hhmm(booking.end_time),
                "status": booking.status,
            }
            for booking in bookings
        ]
