# campus_reservations/core/exceptions.py
"""
Domain-specific exceptions for the reservations platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from .enums import RejectionReason


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class UnauthorizedException(DomainException):
    """Raised when the caller did not identify itself."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class InvalidTransitionException(DomainException):
    """Raised when a booking lifecycle guard is violated."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, current_status: str, event: str):
        super().__init__(
            message=message,
            code="INVALID_TRANSITION",
            details={"current_status": current_status, "event": event},
        )


class ResourceUnavailableException(DomainException):
    """Raised when the resource gate or schedule refuses a slot."""

    status_code = status.HTTP_400_BAD_REQUEST

    _MESSAGES = {
        RejectionReason.RESOURCE_BLOCKED: "Resource is currently blocked",
        RejectionReason.OUTSIDE_SCHEDULE: "Requested time is outside the resource schedule",
        RejectionReason.BLACKOUT_DATE: "Resource is not available on this date",
    }

    def __init__(
        self,
        reason: RejectionReason,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.reason = reason
        super().__init__(
            message=self._MESSAGES.get(reason, "Requested time is not available"),
            code=reason.value.upper(),
            details={"reason": reason.value, **(details or {})},
        )


class BookingConflictException(ConflictException):
    """Raised when a booking conflicts with existing bookings."""

    reason = RejectionReason.TIME_CONFLICT

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "Time slot is already booked",
            code="BOOKING_CONFLICT",
            details={"reason": RejectionReason.TIME_CONFLICT.value, **(details or {})},
        )


class ResourceInUseException(ConflictException):
    """Raised when deleting a resource that still has active bookings."""

    def __init__(self, resource_id: str, active_bookings: int):
        super().__init__(
            message=(
                "Cannot delete resource with active bookings. "
                "Cancel or complete bookings first."
            ),
            code="RESOURCE_IN_USE",
            details={"resource_id": resource_id, "active_bookings": active_bookings},
        )


class SlotBusyException(ServiceException):
    """Raised when a slot lock could not be acquired in time."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, lock_key: str):
        super().__init__(
            message="Another request is updating this resource and date. Please retry.",
            code="SLOT_BUSY",
            details={"lock_key": lock_key},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
