# campus_reservations/services/resource_service.py
"""
Resource Service for the reservations platform.

Admin management of bookable resources, including the blocked flag that
gates new bookings and the guard that keeps resources with active
bookings from being deleted.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import (
    ForbiddenException,
    NotFoundException,
    ResourceInUseException,
    ValidationException,
)
from ..models.resource import Resource, ResourceType
from ..principal import Principal
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("name", "type", "location", "capacity", "description", "image_url", "is_blocked")
_REQUIRED_FIELDS = ("name", "type", "location", "is_blocked")


class ResourceService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_resource_repository(db)

    @staticmethod
    def _require_admin(actor: Principal) -> None:
        if not actor.is_admin:
            raise ForbiddenException("Admin access required", code="ADMIN_REQUIRED")

    @staticmethod
    def _validate_type(resource_type: Any) -> str:
        try:
            return ResourceType(resource_type).value
        except ValueError:
            raise ValidationException(
                "Invalid resource type", details={"type": resource_type}
            ) from None

    @BaseService.measure_operation("get_resource")
    def get_resource(self, resource_id: str) -> Resource:
        resource = self.repository.get_by_id(resource_id)
        if not resource:
            raise NotFoundException("Resource not found", code="RESOURCE_NOT_FOUND")
        return resource

    @BaseService.measure_operation("list_resources")
    def list_resources(
        self,
        *,
        resource_type: Optional[str] = None,
        location: Optional[str] = None,
        search: Optional[str] = None,
        include_blocked: bool = True,
    ) -> List[Resource]:
        if resource_type:
            resource_type = self._validate_type(resource_type)
        return self.repository.list_resources(
            resource_type=resource_type,
            location=location,
            search=search,
            include_blocked=include_blocked,
        )

    @BaseService.measure_operation("create_resource")
    def create_resource(self, data: Dict[str, Any], actor: Principal) -> Resource:
        self._require_admin(actor)
        if not data.get("name") or not data.get("type") or not data.get("location"):
            raise ValidationException("Name, type, and location are required")

        fields = {key: data.get(key) for key in _UPDATABLE_FIELDS if key in data}
        fields["type"] = self._validate_type(data["type"])
        fields["is_blocked"] = bool(data.get("is_blocked", False))

        with self.transaction():
            resource = self.repository.create(**fields)

        self.log_operation("create_resource", resource_id=resource.id, actor_id=actor.id)
        return resource

    @BaseService.measure_operation("update_resource")
    def update_resource(self, resource_id: str, data: Dict[str, Any], actor: Principal) -> Resource:
        self._require_admin(actor)
        updates = {key: value for key, value in data.items() if key in _UPDATABLE_FIELDS}
        if not updates:
            raise ValidationException("No fields to update")
        cleared = sorted(key for key in _REQUIRED_FIELDS if key in updates and updates[key] is None)
        if cleared:
            raise ValidationException("Required fields cannot be cleared", details={"fields": cleared})
        if "type" in updates:
            updates["type"] = self._validate_type(updates["type"])

        with self.transaction():
            resource = self.repository.get_for_update(resource_id)
            if not resource:
                raise NotFoundException("Resource not found", code="RESOURCE_NOT_FOUND")
            for key, value in updates.items():
                setattr(resource, key, value)
            self.repository.flush()

        self.log_operation("update_resource", resource_id=resource_id, fields=sorted(updates))
        return resource

    @BaseService.measure_operation("set_blocked")
    def set_blocked(self, resource_id: str, blocked: bool, actor: Principal) -> Resource:
        """
        Block or unblock a resource.

        Blocking stops new bookings and time changes; existing bookings stay
        manageable and are not cancelled.
        """
        self._require_admin(actor)
        with self.transaction():
            resource = self.repository.get_for_update(resource_id)
            if not resource:
                raise NotFoundException("Resource not found", code="RESOURCE_NOT_FOUND")
            resource.is_blocked = blocked
            self.repository.flush()

        self.logger.info(
            f"Resource {resource_id} {'blocked' if blocked else 'unblocked'} by {actor.id}"
        )
        return resource

    @BaseService.measure_operation("delete_resource")
    def delete_resource(self, resource_id: str, actor: Principal) -> None:
        """Delete a resource; refused while any pending or approved booking exists."""
        self._require_admin(actor)
        with self.transaction():
            resource = self.repository.get_for_update(resource_id)
            if not resource:
                raise NotFoundException("Resource not found", code="RESOURCE_NOT_FOUND")

            active = self.repository.count_active_bookings(resource_id)
            if active > 0:
                raise ResourceInUseException(resource_id, active)

            self.db.delete(resource)
            self.repository.flush()

        self.log_operation("delete_resource", resource_id=resource_id, actor_id=actor.id)
