"""Format checks shared by request schemas."""

from datetime import time
from typing import Optional

from ..domain.slot import DATE_ONLY_REGEX, HHMM_REGEX


def ensure_date_only(value: object, field_name: str) -> object:
    if isinstance(value, str):
        candidate = value.strip()
        if not DATE_ONLY_REGEX.fullmatch(candidate):
            raise ValueError(f"Invalid {field_name} format. Use YYYY-MM-DD")
        return candidate
    return value


def ensure_hhmm(value: object, field_name: str) -> object:
    if isinstance(value, str):
        candidate = value.strip()
        if not HHMM_REGEX.fullmatch(candidate):
            raise ValueError(f"Invalid {field_name} format. Use HH:MM")
        return candidate
    return value


def hhmm(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value is not None else None
