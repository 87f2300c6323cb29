"""FastAPI routers mounted under ``/api`` by the application factory."""

from . import admin, bookings, health, resources

__all__ = ["admin", "bookings", "health", "resources"]
