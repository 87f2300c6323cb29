"""Pydantic request and response schemas for the HTTP API."""

from .availability import AvailabilityRuleCreate, AvailabilityRuleResponse
from .booking import (
    AvailabilityCheckRequest,
    BookingCancelRequest,
    BookingCreate,
    BookingDecisionResponse,
    BookingRejectRequest,
    BookingResponse,
    BookingUpdate,
    DayAvailabilityResponse,
)
from .resource import ResourceBlockRequest, ResourceCreate, ResourceResponse, ResourceUpdate

__all__ = [
    "AvailabilityCheckRequest",
    "AvailabilityRuleCreate",
    "AvailabilityRuleResponse",
    "BookingCancelRequest",
    "BookingCreate",
    "BookingDecisionResponse",
    "BookingRejectRequest",
    "BookingResponse",
    "BookingUpdate",
    "DayAvailabilityResponse",
    "ResourceBlockRequest",
    "ResourceCreate",
    "ResourceResponse",
    "ResourceUpdate",
]
