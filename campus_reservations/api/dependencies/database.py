# campus_reservations/api/dependencies/database.py
"""
Database-related dependencies.
"""

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Get database session dependency.

    The session factory lives on ``app.state`` so each application instance
    (and each test) carries its own store.

    Yields:
        Database session that will be closed after use
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
