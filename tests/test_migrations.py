from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

import shopapi
import shopapi.models  # noqa: F401
from shopapi.database import Base, make_engine


def test_initial_migration_matches_model_indexes(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    config = Config()
    config.set_main_option("script_location", str(Path(shopapi.__file__).parent / "alembic"))
    config.set_main_option("sqlalchemy.url", url)

    command.upgrade(config, "head")

    engine = make_engine(url)
    try:
        inspector = inspect(engine)
        for table in Base.metadata.sorted_tables:
            expected = {(index.name, bool(index.unique)) for index in table.indexes}
            migrated = {(index["name"], bool(index["unique"])) for index in inspector.get_indexes(table.name)}
            assert migrated == expected, table.name
    finally:
        engine.dispose()
