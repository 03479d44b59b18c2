from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from kiosk.core.database import Base, build_engine
import kiosk.models  # noqa: F401

ROOT = Path(__file__).resolve().parents[1]


def _alembic_config(database_url: str) -> Config:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def test_initial_migration_matches_model_tables_and_indexes(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    command.upgrade(_alembic_config(url), "head")

    engine = build_engine(url)
    try:
        inspector = inspect(engine)
        assert set(Base.metadata.tables) <= set(inspector.get_table_names())
        for table in Base.metadata.sorted_tables:
            expected = {index.name for index in table.indexes}
            actual = {index["name"] for index in inspector.get_indexes(table.name)}
            assert actual == expected, table.name
    finally:
        engine.dispose()


def test_initial_migration_downgrades_cleanly(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    cfg = _alembic_config(url)
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    engine = build_engine(url)
    try:
        assert not set(Base.metadata.tables) & set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
