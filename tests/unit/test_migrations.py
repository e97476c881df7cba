"""Alembic migrations build the same schema the ORM expects."""

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ROOT = Path(__file__).resolve().parents[2]


def _alembic_config(db_path: Path) -> Config:
    config = Config(str(ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{db_path}")
    config.attributes["configure_logger"] = False
    return config


@pytest.mark.unit
def test_upgrade_and_downgrade(tmp_path):
    db_path = tmp_path / "migrated.sqlite"
    config = _alembic_config(db_path)

    command.upgrade(config, "head")

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        inspector = inspect(engine)
        assert {"documents", "categories", "tags", "document_tags"} <= set(inspector.get_table_names())
        unique = {tuple(c["column_names"]) for c in inspector.get_unique_constraints("categories")}
        assert ("user_id", "name") in unique
    finally:
        engine.dispose()

    command.downgrade(config, "base")

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        assert "documents" not in inspect(engine).get_table_names()
    finally:
        engine.dispose()
