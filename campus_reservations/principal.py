"""Principals that can act on bookings and resources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, runtime_checkable

from .core.enums import RoleName

SYSTEM_PRINCIPAL_ID = "system"


@runtime_checkable
class Principal(Protocol):
    """Represents the entity performing a booking or resource operation."""

    @property
    def id(self) -> str:
        """Identifier recorded on bookings (owner, canceller)."""
        ...

    @property
    def principal_type(self) -> Literal["user", "system"]:
        ...

    @property
    def is_admin(self) -> bool:
        ...

    @property
    def is_system(self) -> bool:
        ...


@dataclass(frozen=True)
class UserPrincipal:
    """A user identified by the upstream gateway."""

    user_id: str
    role: RoleName = RoleName.STUDENT

    @property
    def id(self) -> str:
        return self.user_id

    @property
    def principal_type(self) -> Literal["user", "system"]:
        return "user"

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN

    @property
    def is_system(self) -> bool:
        return False


@dataclass(frozen=True)
class SystemPrincipal:
    """Internal actor for scheduled or maintenance transitions."""

    name: str = SYSTEM_PRINCIPAL_ID

    @property
    def id(self) -> str:
        return self.name

    @property
    def principal_type(self) -> Literal["user", "system"]:
        return "system"

    @property
    def is_admin(self) -> bool:
        return False

    @property
    def is_system(self) -> bool:
        return True
