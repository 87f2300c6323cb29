# campus_reservations/schemas/resource.py
"""Resource request and response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field, ValidationInfo, field_validator

from ..models.resource import ResourceType
from ._strict_base import StrictModel, StrictRequestModel


class ResourceCreate(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: ResourceType
    location: str = Field(..., min_length=1, max_length=200)
    capacity: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)


class ResourceUpdate(StrictRequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[ResourceType] = None
    location: Optional[str] = Field(None, min_length=1, max_length=200)
    capacity: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    is_blocked: Optional[bool] = None

    @field_validator("name", "type", "location", "is_blocked")
    @classmethod
    def _not_null(cls, v: object, info: ValidationInfo) -> object:
        """These columns may be left out of an update but never cleared."""
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class ResourceBlockRequest(StrictRequestModel):
    is_blocked: bool


class ResourceResponse(StrictModel):
    id: str
    name: str
    type: ResourceType
    location: str
    capacity: Optional[int] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_blocked: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
