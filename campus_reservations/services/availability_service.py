# campus_reservations/services/availability_service.py
"""
Availability Service for the reservations platform.

Answers whether a resource is open for a time range on a date, combining
the blocked flag, date exceptions (blackouts) and the weekly template, and
manages the rules themselves.
"""

from datetime import date, time
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.enums import RejectionReason
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..domain.decisions import BookingPolicy, check_gate, check_schedule
from ..domain.slot import TimeSlot
from ..models.availability import AvailabilityRule
from ..models.resource import Resource
from ..principal import Principal
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


def _require_admin(actor: Principal, action: str) -> None:
    if not actor.is_admin:
        raise ForbiddenException(f"Admin access required to {action}", code="ADMIN_REQUIRED")


class AvailabilityService(BaseService):
    def __init__(self, db: Session, policy: Optional[BookingPolicy] = None):
        super().__init__(db)
        self.policy = policy or BookingPolicy()
        self.resource_repository = RepositoryFactory.create_resource_repository(db)
        self.rule_repository = RepositoryFactory.create_availability_rule_repository(db)

    def _get_resource(self, resource_id: str) -> Resource:
        resource = self.resource_repository.get_by_id(resource_id)
        if not resource:
            raise NotFoundException("Resource not found", code="RESOURCE_NOT_FOUND")
        return resource

    def evaluate_for_resource(self, resource: Resource, slot: TimeSlot) -> Optional[RejectionReason]:
        """Gate and schedule checks for an already loaded resource."""
        reason = check_gate(resource)
        if reason is not None:
            return reason
        rules = self.rule_repository.get_rules_for_date(resource.id, slot.booking_date, slot.day_of_week)
        return check_schedule(slot, rules, open_when_unscheduled=self.policy.open_when_unscheduled)

    @BaseService.measure_operation("evaluate_slot")
    def evaluate_slot(
        self, resource_id: str, booking_date: date, start_time: time, end_time: time
    ) -> Optional[RejectionReason]:
        """Return why the slot is refused, or None when the resource is open for it."""
        slot = TimeSlot(booking_date, start_time, end_time)
        return self.evaluate_for_resource(self._get_resource(resource_id), slot)

    def is_available(
        self, resource_id: str, booking_date: date, start_time: time, end_time: time
    ) -> bool:
        return self.evaluate_slot(resource_id, booking_date, start_time, end_time) is None

    @BaseService.measure_operation("list_rules")
    def list_rules(self, resource_id: str) -> List[AvailabilityRule]:
        self._get_resource(resource_id)
        return self.rule_repository.list_for_resource(resource_id)

    @BaseService.measure_operation("add_rule")
    def add_rule(self, resource_id: str, data: Dict[str, Any], actor: Principal) -> AvailabilityRule:
        """
        Add a weekly rule or a date exception.

        ``data`` carries day_of_week or exception_date (exactly one), an
        optional start_time/end_time window, is_available and is_blackout.
        """
        _require_admin(actor, "manage availability")
        fields = self._validate_rule(data)

        with self.transaction():
            self._get_resource(resource_id)
            rule = self.rule_repository.create(resource_id=resource_id, **fields)

        self.log_operation("add_rule", resource_id=resource_id, rule_id=rule.id)
        return rule

    @BaseService.measure_operation("delete_rule")
    def delete_rule(self, rule_id: str, actor: Principal) -> None:
        _require_admin(actor, "manage availability")
        with self.transaction():
            if not self.rule_repository.delete(rule_id):
                raise NotFoundException("Availability rule not found", code="RULE_NOT_FOUND")
        self.log_operation("delete_rule", rule_id=rule_id)

    @staticmethod
    def _validate_rule(data: Dict[str, Any]) -> Dict[str, Any]:
        day_of_week = data.get("day_of_week")
        exception_date = data.get("exception_date")
        start_time = data.get("start_time")
        end_time = data.get("end_time")

        if (day_of_week is None) == (exception_date is None):
            raise ValidationException(
                "Provide exactly one of day_of_week or exception_date",
                details={"day_of_week": day_of_week, "exception_date": str(exception_date)},
            )
        if day_of_week is not None and not 0 <= int(day_of_week) <= 6:
            raise ValidationException(
                "day_of_week must be between 0 (Sunday) and 6 (Saturday)",
                details={"day_of_week": day_of_week},
            )
        if (start_time is None) != (end_time is None):
            raise ValidationException("Provide both start_time and end_time, or neither")
        if start_time is not None and end_time <= start_time:
            raise ValidationException("End time must be after start time")

        is_blackout = bool(data.get("is_blackout", False))
        if is_blackout and exception_date is None:
            raise ValidationException("Blackouts apply to a specific exception_date")

        return {
            "day_of_week": day_of_week,
            "exception_date": exception_date,
            "start_time": start_time,
            "end_time": end_time,
            "is_available": bool(data.get("is_available", True)) and not is_blackout,
            "is_blackout": is_blackout,
        }
