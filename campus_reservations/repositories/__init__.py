"""
Repository Pattern Implementation for the reservations platform.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
- RepositoryFactory: Factory for creating repository instances
- ResourceRepository: resources, row locks and active-booking counts
- AvailabilityRuleRepository: weekly rules and date exceptions
- ConflictCheckerRepository: active bookings for a resource and date
- BookingRepository: booking CRUD and listings

Usage:
    from campus_reservations.repositories import RepositoryFactory

    repository = RepositoryFactory.create_conflict_checker_repository(db)
    bookings = repository.get_bookings_for_date(resource_id, target_date)
"""

from .availability_rule_repository import AvailabilityRuleRepository
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .conflict_checker_repository import ConflictCheckerRepository
from .factory import RepositoryFactory
from .resource_repository import ResourceRepository

__all__ = [
    "AvailabilityRuleRepository",
    "BaseRepository",
    "BookingRepository",
    "ConflictCheckerRepository",
    "RepositoryFactory",
    "ResourceRepository",
]
