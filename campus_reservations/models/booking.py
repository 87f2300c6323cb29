# campus_reservations/models/booking.py
"""
Booking model for the reservations platform.

A booking reserves one resource for a half-open time window on a single
date. Bookings carry their own date and times; the scheduling core compares
those fields directly when looking for conflicts.
"""

from datetime import date, datetime, timezone
from enum import Enum
import logging
from typing import Any, Optional

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, String, Text, Time
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.APPROVED)
TERMINAL_STATUSES = (BookingStatus.CANCELLED, BookingStatus.COMPLETED)


class Booking(Base):
    """Reservation of a resource by a user for one time window."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)

    # External identity of the booking owner
    user_id = Column(String(64), nullable=False, index=True)
    resource_id = Column(
        String(26), ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True
    )

    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    purpose = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default=BookingStatus.APPROVED.value, index=True)
    rejection_reason = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by_id = Column(String(64), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    resource = relationship("Resource", back_populates="bookings")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'cancelled', 'completed')",
            name="ck_bookings_status",
        ),
        CheckConstraint("start_time < end_time", name="check_time_order"),
        Index("idx_bookings_resource_date_status", "resource_id", "booking_date", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: user={self.user_id}, resource={self.resource_id}, "
            f"date={self.booking_date}, time={self.start_time}-{self.end_time}, "
            f"status={self.status}>"
        )

    @property
    def status_enum(self) -> BookingStatus:
        return BookingStatus(self.status)

    @property
    def is_active(self) -> bool:
        """Active bookings block overlapping requests and resource deletion."""
        return self.status in {s.value for s in ACTIVE_STATUSES}

    @property
    def is_terminal(self) -> bool:
        return self.status in {s.value for s in TERMINAL_STATUSES}

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def is_upcoming(self, today: date, now: Optional[datetime] = None) -> bool:
        if self.booking_date > today:
            return True
        if self.booking_date < today:
            return False
        current = (now or datetime.now()).time()
        return self.end_time > current

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    def _fire(self, event: str) -> None:
        from ..domain.booking_lifecycle import BookingEvent, next_status

        self.status = next_status(self.status, BookingEvent(event)).value
        self.touch()

    def approve(self) -> None:
        """Approve a pending booking."""
        self._fire("approve")
        logger.info(f"Booking {self.id} approved")

    def reject(self, reason: Optional[str] = None) -> None:
        """Reject a pending or approved booking."""
        self._fire("reject")
        self.rejection_reason = reason
        logger.info(f"Booking {self.id} rejected")

    def cancel(self, cancelled_by_id: str, reason: Optional[str] = None) -> None:
        """Cancel this booking."""
        self._fire("cancel")
        self.cancelled_at = datetime.now(timezone.utc)
        self.cancelled_by_id = cancelled_by_id
        self.cancellation_reason = reason
        logger.info(f"Booking {self.id} cancelled by user {cancelled_by_id}")

    def complete(self) -> None:
        """Mark booking as completed."""
        self._fire("complete")
        self.completed_at = datetime.now(timezone.utc)
        logger.info(f"Booking {self.id} marked as completed")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "resource_id": self.resource_id,
            "booking_date": self.booking_date.isoformat() if self.booking_date else None,
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
            "purpose": self.purpose,
            "status": self.status,
            "rejection_reason": self.rejection_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "cancelled_by_id": self.cancelled_by_id,
            "cancellation_reason": self.cancellation_reason,
        }
