# campus_reservations/routes/resources.py
"""
Resource and availability routes.

Router Endpoints:
    GET / - List resources (filter by type, location, search)
    GET /{resource_id} - Resource details
    POST / - Create a resource (admin)
    PUT /{resource_id} - Update a resource (admin)
    DELETE /{resource_id} - Delete a resource without active bookings (admin)
    GET /{resource_id}/availability - Weekly rules and date exceptions
    POST /{resource_id}/availability - Add a rule or exception (admin)
    DELETE /availability/{rule_id} - Remove a rule (admin)
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..api.dependencies import (
    get_availability_service,
    get_resource_service,
    require_admin,
)
from ..core.exceptions import DomainException
from ..models.resource import ResourceType
from ..principal import UserPrincipal
from ..schemas.availability import AvailabilityRuleCreate, AvailabilityRuleResponse
from ..schemas.resource import ResourceCreate, ResourceResponse, ResourceUpdate
from ..services.availability_service import AvailabilityService
from ..services.resource_service import ResourceService
from ._errors import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resources", tags=["resources"])


@router.get("", response_model=List[ResourceResponse])
def list_resources(
    resource_type: Optional[ResourceType] = Query(None, alias="type"),
    location: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    include_blocked: bool = Query(True),
    resource_service: ResourceService = Depends(get_resource_service),
):
    try:
        resources = resource_service.list_resources(
            resource_type=resource_type.value if resource_type else None,
            location=location,
            search=search,
            include_blocked=include_blocked,
        )
        return [ResourceResponse.model_validate(r) for r in resources]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=ResourceResponse, status_code=status.HTTP_201_CREATED)
def create_resource(
    resource_data: ResourceCreate,
    current_user: UserPrincipal = Depends(require_admin),
    resource_service: ResourceService = Depends(get_resource_service),
):
    try:
        resource = resource_service.create_resource(
            resource_data.model_dump(mode="json"), current_user
        )
        return ResourceResponse.model_validate(resource)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/availability/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_availability_rule(
    rule_id: str,
    current_user: UserPrincipal = Depends(require_admin),
    availability_service: AvailabilityService = Depends(get_availability_service),
):
    try:
        availability_service.delete_rule(rule_id, current_user)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{resource_id}", response_model=ResourceResponse)
def get_resource(
    resource_id: str,
    resource_service: ResourceService = Depends(get_resource_service),
):
    try:
        return ResourceResponse.model_validate(resource_service.get_resource(resource_id))
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/{resource_id}", response_model=ResourceResponse)
def update_resource(
    resource_id: str,
    update_data: ResourceUpdate,
    current_user: UserPrincipal = Depends(require_admin),
    resource_service: ResourceService = Depends(get_resource_service),
):
    try:
        resource = resource_service.update_resource(
            resource_id, update_data.model_dump(mode="json", exclude_unset=True), current_user
        )
        return ResourceResponse.model_validate(resource)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resource(
    resource_id: str,
    current_user: UserPrincipal = Depends(require_admin),
    resource_service: ResourceService = Depends(get_resource_service),
):
    """Delete a resource; refused with 409 while it has pending or approved bookings."""
    try:
        resource_service.delete_resource(resource_id, current_user)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{resource_id}/availability", response_model=List[AvailabilityRuleResponse])
def list_availability_rules(
    resource_id: str,
    availability_service: AvailabilityService = Depends(get_availability_service),
):
    try:
        rules = availability_service.list_rules(resource_id)
        return [AvailabilityRuleResponse.model_validate(rule) for rule in rules]
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{resource_id}/availability",
    response_model=AvailabilityRuleResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_availability_rule(
    resource_id: str,
    rule_data: AvailabilityRuleCreate,
    current_user: UserPrincipal = Depends(require_admin),
    availability_service: AvailabilityService = Depends(get_availability_service),
):
    try:
        rule = availability_service.add_rule(resource_id, rule_data.model_dump(), current_user)
        return AvailabilityRuleResponse.model_validate(rule)
    except DomainException as e:
        handle_domain_exception(e)
