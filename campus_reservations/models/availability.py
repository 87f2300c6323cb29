# campus_reservations/models/availability.py
"""
Availability rules for resources.

A rule is either part of the weekly template (``day_of_week`` set, 0 = Sunday)
or an exception for one calendar date (``exception_date`` set). Exceptions
that grant or close the whole day replace the weekly template for that date;
exceptions that only close a window are applied on top of it. A rule without
a window applies to the whole day.
"""

from typing import Any

from sqlalchemy import Boolean, CheckConstraint, Column, Date, ForeignKey, Integer, String, Time
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base


class AvailabilityRule(Base):
    __tablename__ = "availability_rules"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    resource_id = Column(
        String(26), ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week = Column(Integer, nullable=True)
    exception_date = Column(Date, nullable=True, index=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True, server_default="1")
    is_blackout = Column(Boolean, nullable=False, default=False, server_default="0")

    resource = relationship("Resource", back_populates="availability_rules")

    __table_args__ = (
        CheckConstraint(
            "day_of_week IS NULL OR (day_of_week BETWEEN 0 AND 6)",
            name="ck_availability_rules_day_of_week",
        ),
        CheckConstraint(
            "(day_of_week IS NULL) <> (exception_date IS NULL)",
            name="ck_availability_rules_kind",
        ),
        CheckConstraint(
            "(start_time IS NULL AND end_time IS NULL) OR "
            "(start_time IS NOT NULL AND end_time IS NOT NULL AND start_time < end_time)",
            name="ck_availability_rules_window",
        ),
    )

    @property
    def is_exception(self) -> bool:
        return self.exception_date is not None

    @property
    def has_window(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    def __repr__(self) -> str:
        when = self.exception_date.isoformat() if self.exception_date else f"dow={self.day_of_week}"
        return (
            f"<AvailabilityRule {self.id}: resource={self.resource_id} {when} "
            f"{self.start_time}-{self.end_time} available={self.is_available} "
            f"blackout={self.is_blackout}>"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "resource_id": self.resource_id,
            "day_of_week": self.day_of_week,
            "exception_date": self.exception_date.isoformat() if self.exception_date else None,
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
            "is_available": bool(self.is_available),
            "is_blackout": bool(self.is_blackout),
        }
