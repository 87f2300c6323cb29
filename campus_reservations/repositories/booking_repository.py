# campus_reservations/repositories/booking_repository.py
"""
Booking Repository for the reservations platform.

This repository handles:
- Booking CRUD operations
- Owner-specific booking queries
- Admin listing with filters
"""

from datetime import date
import logging
from typing import Any, List, Optional, cast

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        """Initialize with Booking model."""
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def create(self, **kwargs: Any) -> Booking:
        """
        Add a booking and flush it.

        IntegrityError is left unwrapped; the booking service reports the
        overlap constraint as a conflict.
        """
        booking = Booking(**kwargs)
        self.db.add(booking)
        self.flush()
        return booking

    def flush(self) -> None:
        try:
            self.db.flush()
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"Error saving booking: {str(e)}")
            raise RepositoryException(f"Failed to save Booking: {str(e)}") from e

    def get_user_bookings(
        self,
        user_id: str,
        *,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
    ) -> List[Booking]:
        """Bookings owned by a user, most recent first."""
        query = self._build_query().filter(Booking.user_id == user_id)
        if status:
            query = query.filter(Booking.status == status)
        if date_from:
            query = query.filter(Booking.booking_date >= date_from)
        query = query.order_by(Booking.booking_date.desc(), Booking.start_time.desc())
        return cast(List[Booking], self._execute_query(query))

    def list_bookings(
        self,
        *,
        status: Optional[str] = None,
        resource_id: Optional[str] = None,
        user_id: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Booking]:
        """Admin listing: optional filters, newest date and time first."""
        query = self._build_query()
        if status:
            query = query.filter(Booking.status == status)
        if resource_id:
            query = query.filter(Booking.resource_id == resource_id)
        if user_id:
            query = query.filter(Booking.user_id == user_id)
        if date_from:
            query = query.filter(Booking.booking_date >= date_from)
        if date_to:
            query = query.filter(Booking.booking_date <= date_to)
        query = (
            query.order_by(Booking.booking_date.desc(), Booking.start_time.desc())
            .offset(skip)
            .limit(limit)
        )
        return cast(List[Booking], self._execute_query(query))

    def get_for_update(self, booking_id: str) -> Optional[Booking]:
        """Re-read a booking inside the current transaction, locking its row."""
        try:
            query = (
                self._build_query()
                .filter(Booking.id == booking_id)
                .populate_existing()
            )
            if self.dialect_name != "sqlite":
                query = query.with_for_update()
            return cast(Optional[Booking], query.first())
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock booking: {str(e)}")
