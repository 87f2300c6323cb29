"""Schema creation and sample data seeding."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool

from campus_reservations import init_db as init_db_module
from campus_reservations.database import create_db_engine, session_scope
from campus_reservations.init_db import SAMPLE_RESOURCES, prepare_schema, seed_resources
from campus_reservations.models.resource import Resource


def test_seed_resources_is_idempotent(session_factory):
    with session_scope(session_factory) as session:
        assert seed_resources(session) == len(SAMPLE_RESOURCES)

    with session_scope(session_factory) as session:
        assert seed_resources(session) == 0
        assert session.query(Resource).count() == len(SAMPLE_RESOURCES)
        kinds = {r.type for r in session.query(Resource).all()}
        assert kinds == {"room", "lab", "equipment"}


class TestPrepareSchema:
    def test_sqlite_tables_are_created(self):
        engine = create_db_engine("sqlite://", echo=False, poolclass=StaticPool)
        try:
            prepare_schema(engine)
            assert inspect(engine).has_table("bookings")
        finally:
            engine.dispose()

    @pytest.fixture
    def postgres_engine(self):
        engine = MagicMock()
        engine.dialect.name = "postgresql"
        return engine

    def test_unmigrated_postgres_is_refused(self, postgres_engine):
        with patch.object(init_db_module, "inspect") as inspector, patch.object(
            init_db_module, "init_db"
        ) as create_all:
            inspector.return_value.has_table.return_value = False
            with pytest.raises(RuntimeError, match="alembic upgrade head"):
                prepare_schema(postgres_engine)
        create_all.assert_not_called()

    def test_migrated_postgres_is_left_alone(self, postgres_engine):
        with patch.object(init_db_module, "inspect") as inspector, patch.object(
            init_db_module, "init_db"
        ) as create_all:
            inspector.return_value.has_table.return_value = True
            prepare_schema(postgres_engine)
        create_all.assert_not_called()

    def test_main_exits_without_seeding(self, postgres_engine):
        with patch.object(init_db_module, "create_db_engine", return_value=postgres_engine), patch.object(
            init_db_module, "prepare_schema", side_effect=RuntimeError("run `alembic upgrade head`")
        ), patch.object(init_db_module, "seed_resources") as seed:
            with pytest.raises(SystemExit) as exc_info:
                init_db_module.main()
        assert exc_info.value.code == 1
        seed.assert_not_called()
