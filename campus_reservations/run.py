# campus_reservations/run.py
"""
API server runner.

Usage:
    campus-reservations
    python -m campus_reservations.run

The app is built by ``create_app`` inside the server process, so the
engine and slot locker belong to the worker that serves requests.
"""

import uvicorn

from .core.config import settings


def main() -> None:
    uvicorn.run(
        "campus_reservations.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
