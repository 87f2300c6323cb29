# tests/conftest.py
"""
Pytest configuration for the reservations service.

Every test gets a fresh in-memory SQLite store pinned to one connection, a
private slot locker (no Redis) and a booking policy that accepts past dates
so scenarios can use fixed calendar dates.
"""

import os

# Set the environment BEFORE any app imports so Settings picks it up.
os.environ["ENVIRONMENT"] = "test"
os.environ["REDIS_URL"] = ""
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, time
from typing import Any, Callable, Dict, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from campus_reservations.core.booking_lock import SlotLocker, SlotLockRegistry
from campus_reservations.core.config import Settings
from campus_reservations.core.enums import RoleName
from campus_reservations.database import create_db_engine, create_session_factory, init_db
from campus_reservations.domain.decisions import BookingPolicy
from campus_reservations.main import create_app
from campus_reservations.models.availability import AvailabilityRule
from campus_reservations.models.booking import Booking
from campus_reservations.models.resource import Resource
from campus_reservations.principal import SystemPrincipal, UserPrincipal
from campus_reservations.services.booking_service import BookingService

# 2024-06-10 is a Monday (day_of_week 1 with 0 = Sunday).
MONDAY = date(2024, 6, 10)
TUESDAY = date(2024, 6, 11)


# ============================================================================
# Store
# ============================================================================


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of the test."""
    engine = create_db_engine("sqlite://", echo=False, poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def slot_locker() -> SlotLocker:
    return SlotLocker(SlotLockRegistry(), redis_url=None, wait_s=2)


@pytest.fixture
def policy() -> BookingPolicy:
    return BookingPolicy(reject_past_dates=False)


# ============================================================================
# Principals
# ============================================================================


@pytest.fixture
def admin() -> UserPrincipal:
    return UserPrincipal("admin-1", RoleName.ADMIN)


@pytest.fixture
def student() -> UserPrincipal:
    return UserPrincipal("student-1", RoleName.STUDENT)


@pytest.fixture
def other_student() -> UserPrincipal:
    return UserPrincipal("student-2", RoleName.STUDENT)


@pytest.fixture
def system_actor() -> SystemPrincipal:
    return SystemPrincipal()


# ============================================================================
# Data factories
# ============================================================================


@pytest.fixture
def make_resource(db) -> Callable[..., Resource]:
    def _make(
        name: str = "Study Room 1",
        resource_type: str = "room",
        location: str = "Library",
        capacity: Optional[int] = 4,
        is_blocked: bool = False,
    ) -> Resource:
        resource = Resource(
            name=name, type=resource_type, location=location, capacity=capacity, is_blocked=is_blocked
        )
        db.add(resource)
        db.commit()
        return resource

    return _make


@pytest.fixture
def resource(make_resource) -> Resource:
    return make_resource()


@pytest.fixture
def make_rule(db) -> Callable[..., AvailabilityRule]:
    def _make(
        resource_id: str,
        *,
        day_of_week: Optional[int] = None,
        exception_date: Optional[date] = None,
        start: Optional[time] = None,
        end: Optional[time] = None,
        is_available: bool = True,
        is_blackout: bool = False,
    ) -> AvailabilityRule:
        rule = AvailabilityRule(
            resource_id=resource_id,
            day_of_week=day_of_week,
            exception_date=exception_date,
            start_time=start,
            end_time=end,
            is_available=is_available,
            is_blackout=is_blackout,
        )
        db.add(rule)
        db.commit()
        return rule

    return _make


@pytest.fixture
def make_booking(db) -> Callable[..., Booking]:
    """Insert a booking directly, bypassing the decision pipeline."""

    def _make(
        resource_id: str,
        start: time,
        end: time,
        *,
        booking_date: date = MONDAY,
        user_id: str = "student-1",
        status: str = "approved",
    ) -> Booking:
        booking = Booking(
            user_id=user_id,
            resource_id=resource_id,
            booking_date=booking_date,
            start_time=start,
            end_time=end,
            status=status,
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


# ============================================================================
# Services
# ============================================================================


@pytest.fixture
def booking_service(db, policy, slot_locker) -> BookingService:
    return BookingService(db, policy=policy, slot_locker=slot_locker)


# ============================================================================
# HTTP
# ============================================================================


@pytest.fixture
def app_settings() -> Settings:
    return Settings(
        environment="test",
        database_url="sqlite://",
        redis_url=None,
        reject_past_dates=False,
    )


@pytest.fixture
def app(engine, slot_locker, app_settings):
    return create_app(app_settings, engine=engine, slot_locker=slot_locker)


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


def _headers(user_id: str, role: str) -> Dict[str, Any]:
    return {"X-User-Id": user_id, "X-User-Role": role}


@pytest.fixture
def admin_headers() -> Dict[str, Any]:
    return _headers("admin-1", "admin")


@pytest.fixture
def student_headers() -> Dict[str, Any]:
    return _headers("student-1", "student")


@pytest.fixture
def other_student_headers() -> Dict[str, Any]:
    return _headers("student-2", "student")


@pytest.fixture
def api_resource(client, admin_headers) -> Dict[str, Any]:
    """A resource created through the API."""
    response = client.post(
        "/api/resources",
        json={"name": "LAB 1", "type": "lab", "location": "H Building", "capacity": 20},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()
