# campus_reservations/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ...core.booking_lock import SlotLocker
from ...domain.decisions import BookingPolicy
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.conflict_checker import ConflictChecker
from ...services.resource_service import ResourceService
from .database import get_db

logger = logging.getLogger(__name__)


def get_booking_policy(request: Request) -> BookingPolicy:
    return request.app.state.booking_policy


def get_slot_locker(request: Request) -> SlotLocker:
    return request.app.state.slot_locker


def get_booking_service(
    db: Session = Depends(get_db),
    policy: BookingPolicy = Depends(get_booking_policy),
    slot_locker: SlotLocker = Depends(get_slot_locker),
) -> BookingService:
    """Get BookingService instance with proper dependencies."""
    return BookingService(db, policy=policy, slot_locker=slot_locker)


def get_availability_service(
    db: Session = Depends(get_db),
    policy: BookingPolicy = Depends(get_booking_policy),
) -> AvailabilityService:
    return AvailabilityService(db, policy=policy)


def get_resource_service(db: Session = Depends(get_db)) -> ResourceService:
    return ResourceService(db)


def get_conflict_checker(db: Session = Depends(get_db)) -> ConflictChecker:
    return ConflictChecker(db)
