# campus_reservations/repositories/resource_repository.py
"""Data access for bookable resources."""

import logging
from typing import List, Optional, cast

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import ACTIVE_STATUSES, Booking
from ..models.resource import Resource
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ResourceRepository(BaseRepository[Resource]):
    def __init__(self, db: Session):
        super().__init__(db, Resource)

    def get_for_update(self, resource_id: str) -> Optional[Resource]:
        """
        Load a resource and lock its row until the transaction ends.

        SQLite ignores FOR UPDATE; there the slot lock serializes writers.
        """
        try:
            query = (
                self.db.query(Resource).filter(Resource.id == resource_id).populate_existing()
            )
            if self.dialect_name != "sqlite":
                query = query.with_for_update()
            return cast(Optional[Resource], query.first())
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking resource {resource_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock resource: {str(e)}")

    def list_resources(
        self,
        *,
        resource_type: Optional[str] = None,
        location: Optional[str] = None,
        search: Optional[str] = None,
        include_blocked: bool = True,
    ) -> List[Resource]:
        query = self._build_query()
        if resource_type:
            query = query.filter(Resource.type == resource_type)
        if location:
            query = query.filter(Resource.location.ilike(f"%{location}%"))
        if search:
            term = f"%{search}%"
            query = query.filter(or_(Resource.name.ilike(term), Resource.description.ilike(term)))
        if not include_blocked:
            query = query.filter(Resource.is_blocked.is_(False))
        return self._execute_query(query.order_by(Resource.type, Resource.name))

    def count_active_bookings(self, resource_id: str) -> int:
        query = self.db.query(func.count(Booking.id)).filter(
            Booking.resource_id == resource_id,
            Booking.status.in_([s.value for s in ACTIVE_STATUSES]),
        )
        return int(self._execute_scalar(query) or 0)
