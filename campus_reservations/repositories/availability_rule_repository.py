# campus_reservations/repositories/availability_rule_repository.py
"""Data access for weekly availability rules and date exceptions."""

from datetime import date
import logging
from typing import List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models.availability import AvailabilityRule
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRuleRepository(BaseRepository[AvailabilityRule]):
    def __init__(self, db: Session):
        super().__init__(db, AvailabilityRule)

    def list_for_resource(self, resource_id: str) -> List[AvailabilityRule]:
        query = (
            self._build_query()
            .filter(AvailabilityRule.resource_id == resource_id)
            .order_by(
                AvailabilityRule.exception_date,
                AvailabilityRule.day_of_week,
                AvailabilityRule.start_time,
            )
        )
        return self._execute_query(query)

    def get_rules_for_date(
        self, resource_id: str, target_date: date, day_of_week: int
    ) -> List[AvailabilityRule]:
        """
        Rules that can apply to ``target_date``: exceptions for that date and
        weekly rules for its day of week (0 = Sunday).
        """
        query = self._build_query().filter(
            AvailabilityRule.resource_id == resource_id,
            or_(
                AvailabilityRule.exception_date == target_date,
                (AvailabilityRule.exception_date.is_(None))
                & (AvailabilityRule.day_of_week == day_of_week),
            ),
        )
        return self._execute_query(query)
