# campus_reservations/schemas/availability.py
"""Availability rule schemas (weekly template entries and date exceptions)."""

from datetime import date, time
from typing import Optional

from pydantic import Field, field_serializer, field_validator, model_validator

from ._strict_base import StrictModel, StrictRequestModel
from ._validators import ensure_date_only, ensure_hhmm, hhmm


class AvailabilityRuleCreate(StrictRequestModel):
    """
    A weekly rule sets ``day_of_week`` (0 = Sunday ... 6 = Saturday); a date
    exception sets ``exception_date``. Omit both times for a whole-day rule.
    """

    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    exception_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_available: bool = True
    is_blackout: bool = False

    @field_validator("exception_date", mode="before")
    @classmethod
    def _validate_date(cls, value: object) -> object:
        return ensure_date_only(value, "exception_date")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _validate_time(cls, value: object) -> object:
        return ensure_hhmm(value, "time")

    @model_validator(mode="after")
    def _check_kind(self) -> "AvailabilityRuleCreate":
        if (self.day_of_week is None) == (self.exception_date is None):
            raise ValueError("Provide exactly one of day_of_week or exception_date")
        return self


class AvailabilityRuleResponse(StrictModel):
    id: str
    resource_id: str
    day_of_week: Optional[int] = None
    exception_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_available: bool
    is_blackout: bool

    @field_serializer("start_time", "end_time")
    def _serialize_time(self, value: Optional[time]) -> Optional[str]:
        return hhmm(value)
