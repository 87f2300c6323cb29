# campus_reservations/models/resource.py
"""
Resource model: a bookable room, lab or piece of equipment.

Resources are managed by admins. A blocked resource accepts no new booking
and no time change of an existing one; it is never deleted while a pending
or approved booking references it.
"""

from enum import Enum
from typing import Any

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class ResourceType(str, Enum):
    ROOM = "room"
    LAB = "lab"
    EQUIPMENT = "equipment"


class Resource(Base):
    __tablename__ = "resources"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False, index=True)
    location = Column(String(200), nullable=False)
    capacity = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)
    is_blocked = Column(Boolean, nullable=False, default=False, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    availability_rules = relationship(
        "AvailabilityRule",
        back_populates="resource",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    bookings = relationship(
        "Booking",
        back_populates="resource",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("type IN ('room', 'lab', 'equipment')", name="ck_resources_type"),
        CheckConstraint("capacity IS NULL OR capacity >= 0", name="ck_resources_capacity"),
    )

    def __repr__(self) -> str:
        return f"<Resource {self.id}: {self.name} ({self.type}) blocked={self.is_blocked}>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "location": self.location,
            "capacity": self.capacity,
            "description": self.description,
            "image_url": self.image_url,
            "is_blocked": bool(self.is_blocked),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
