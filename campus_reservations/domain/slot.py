"""
Time slot value object.

A slot is a half-open ``[start, end)`` interval of wall-clock time on one
calendar date. Touching slots (10:00-11:00 and 11:00-12:00) do not overlap.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
import re
from typing import Iterable, List, Optional, Tuple

from ..core.exceptions import ValidationException

HHMM_REGEX = re.compile(r"^\d{2}:\d{2}$")
DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_hhmm(value: str, field_name: str = "time") -> time:
    """Parse a 24-hour ``HH:MM`` string."""
    candidate = (value or "").strip()
    if not HHMM_REGEX.fullmatch(candidate):
        raise ValidationException(
            f"Invalid {field_name} format. Use HH:MM", details={field_name: value}
        )
    try:
        return datetime.strptime(candidate, "%H:%M").time()
    except ValueError as exc:
        raise ValidationException(
            f"Invalid {field_name} format. Use HH:MM", details={field_name: value}
        ) from exc


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def parse_iso_date(value: str, field_name: str = "date") -> date:
    """Parse a ``YYYY-MM-DD`` string."""
    candidate = (value or "").strip()
    if not DATE_ONLY_REGEX.fullmatch(candidate):
        raise ValidationException(
            f"Invalid {field_name} format. Use YYYY-MM-DD", details={field_name: value}
        )
    try:
        return date.fromisoformat(candidate)
    except ValueError as exc:
        raise ValidationException(
            f"Invalid {field_name} format. Use YYYY-MM-DD", details={field_name: value}
        ) from exc


def intervals_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    return start_a < end_b and start_b < end_a


def merge_windows(windows: Iterable[Tuple[time, time]]) -> List[Tuple[time, time]]:
    """Merge overlapping or touching windows into disjoint sorted windows."""
    merged: List[Tuple[time, time]] = []
    for start, end in sorted(windows):
        if merged and start <= merged[-1][1]:
            if end > merged[-1][1]:
                merged[-1] = (merged[-1][0], end)
        else:
            merged.append((start, end))
    return merged


@dataclass(frozen=True)
class TimeSlot:
    booking_date: date
    start_time: time
    end_time: time

    def __post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise ValidationException(
                "End time must be after start time",
                details={
                    "start_time": format_hhmm(self.start_time),
                    "end_time": format_hhmm(self.end_time),
                },
            )

    @classmethod
    def from_strings(cls, booking_date: str, start_time: str, end_time: str) -> "TimeSlot":
        return cls(
            parse_iso_date(booking_date, "booking_date"),
            parse_hhmm(start_time, "start_time"),
            parse_hhmm(end_time, "end_time"),
        )

    @property
    def day_of_week(self) -> int:
        """Day of week with 0 = Sunday, matching stored weekly rules."""
        return (self.booking_date.weekday() + 1) % 7

    def overlaps(self, other: "TimeSlot") -> bool:
        if self.booking_date != other.booking_date:
            return False
        return intervals_overlap(self.start_time, self.end_time, other.start_time, other.end_time)

    def overlaps_window(self, start: time, end: time) -> bool:
        return intervals_overlap(self.start_time, self.end_time, start, end)

    def within(self, start: time, end: time) -> bool:
        return start <= self.start_time and self.end_time <= end

    def within_any(self, windows: Iterable[Tuple[time, time]]) -> bool:
        return any(self.within(start, end) for start, end in merge_windows(windows))

    def with_changes(
        self,
        *,
        booking_date: Optional[date] = None,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
    ) -> "TimeSlot":
        return TimeSlot(
            booking_date if booking_date is not None else self.booking_date,
            start_time if start_time is not None else self.start_time,
            end_time if end_time is not None else self.end_time,
        )

    def __str__(self) -> str:
        return (
            f"{self.booking_date.isoformat()} "
            f"{format_hhmm(self.start_time)}-{format_hhmm(self.end_time)}"
        )
