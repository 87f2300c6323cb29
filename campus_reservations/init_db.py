# campus_reservations/init_db.py
"""
Create the schema and seed the sample resources.

SQLite stores get their tables created directly. Other databases must be
migrated with Alembic first (`alembic upgrade head`), since the PostgreSQL
schema carries the booking overlap constraint that create_all cannot build.

Usage:
    python -m campus_reservations.init_db
"""

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from .core.config import settings
from .database import create_db_engine, create_session_factory, init_db, session_scope
from .models.resource import Resource, ResourceType

logger = logging.getLogger(__name__)

SAMPLE_RESOURCES = [
    ("Study Room 1", ResourceType.ROOM, "Library", 4, "Quiet study room with whiteboard"),
    ("Study Room 2", ResourceType.ROOM, "H Building", 6, "Group study room"),
    ("Study Room 3", ResourceType.ROOM, "R Building", 4, "Study room with projector"),
    ("Study Room 4", ResourceType.ROOM, "Library", 8, "Large group study room"),
    ("LAB 1", ResourceType.LAB, "H Building", 20, "Computer lab with 20 workstations"),
    ("LAB 2", ResourceType.LAB, "B Building", 30, "Engineering lab"),
    ("Lab 3", ResourceType.LAB, "K Building", 15, "Chemistry lab"),
    ("LAB 4", ResourceType.LAB, "R Building", 25, "Physics lab"),
    ("Projector Kit", ResourceType.EQUIPMENT, "Library", 1, "Portable projector and screen"),
    ("Chemistry Kit", ResourceType.EQUIPMENT, "H Building", 1, "Chemistry experiment equipment"),
    ("Electronic Kit", ResourceType.EQUIPMENT, "R Building", 1, "Electronics components and tools"),
    ("Physics Kit", ResourceType.EQUIPMENT, "K Building", 1, "Physics experiment equipment"),
]


def seed_resources(session) -> int:
    """Insert the sample resources that are not present yet (matched by name)."""
    existing = {name for (name,) in session.query(Resource.name).all()}
    created = 0
    for name, resource_type, location, capacity, description in SAMPLE_RESOURCES:
        if name in existing:
            continue
        session.add(
            Resource(
                name=name,
                type=resource_type.value,
                location=location,
                capacity=capacity,
                description=description,
            )
        )
        created += 1
    return created


def prepare_schema(engine: Engine) -> None:
    if engine.dialect.name == "sqlite":
        init_db(engine)
        return
    if not inspect(engine).has_table("bookings"):
        raise RuntimeError(
            f"No reservations schema in the {engine.dialect.name} database; "
            "run `alembic upgrade head` before seeding"
        )


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    engine = create_db_engine(settings.database_url)
    try:
        prepare_schema(engine)
    except RuntimeError as exc:
        logger.error(str(exc))
        raise SystemExit(1) from exc
    with session_scope(create_session_factory(engine)) as session:
        created = seed_resources(session)
    logger.info(f"Database ready at {engine.url.render_as_string(hide_password=True)}; {created} sample resources added")


if __name__ == "__main__":
    main()
