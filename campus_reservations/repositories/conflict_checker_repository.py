# campus_reservations/repositories/conflict_checker_repository.py
"""
ConflictChecker Repository for the reservations platform.

All conflict checking is done using the booking's own fields
(resource, date, start_time, end_time); only pending and approved
bookings occupy a slot.
"""

from datetime import date
import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import ACTIVE_STATUSES, Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

_ACTIVE_VALUES = [s.value for s in ACTIVE_STATUSES]


class ConflictCheckerRepository(BaseRepository[Booking]):
    """Repository for conflict checking data access."""

    def __init__(self, db: Session):
        """Initialize with Booking model as primary."""
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def get_bookings_for_conflict_check(
        self, resource_id: str, check_date: date, exclude_booking_id: Optional[str] = None
    ) -> List[Booking]:
        """
        Get active bookings that could conflict with a time range on a date.

        Args:
            resource_id: The resource to check
            check_date: The date to check for conflicts
            exclude_booking_id: Optional booking ID to exclude from results

        Returns:
            List of active bookings for the resource on that date
        """
        try:
            query = self.db.query(Booking).populate_existing().filter(
                Booking.resource_id == resource_id,
                Booking.booking_date == check_date,
                Booking.status.in_(_ACTIVE_VALUES),
            )

            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)

            return cast(List[Booking], query.all())

        except Exception as e:
            self.logger.error(f"Error getting bookings for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict bookings: {str(e)}")

    def get_bookings_for_date(self, resource_id: str, target_date: date) -> List[Booking]:
        """Active bookings for a resource on a date, ordered by start time."""
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .populate_existing()
                .filter(
                    Booking.resource_id == resource_id,
                    Booking.booking_date == target_date,
                    Booking.status.in_(_ACTIVE_VALUES),
                )
                .order_by(Booking.start_time)
                .all(),
            )

        except Exception as e:
            self.logger.error(f"Error getting bookings for date: {str(e)}")
            raise RepositoryException(f"Failed to get bookings: {str(e)}")
