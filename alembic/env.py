"""Alembic environment for the luckydraw schema (patrons, sign_ins, drawings)."""

from __future__ import annotations

import os
import sys
from logging.config import fileConfig
from pathlib import Path
from typing import Any

from alembic import context
from dotenv import load_dotenv

# alembic runs from the repo root without the package installed
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))
load_dotenv(REPO_ROOT / ".env")

from luckydraw.db.engine import DEFAULT_SQLITE_URL, make_engine  # noqa: E402
from luckydraw.db.utils import resolve_sqlite_url  # noqa: E402
from luckydraw.models import Base  # noqa: E402  registers the three raffle tables

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def raffle_database_url() -> str:
    """``DB_URL`` from the environment, or the dev SQLite file in the repo root."""
    env_url = os.getenv("DB_URL")
    if not env_url:
        return DEFAULT_SQLITE_URL
    return resolve_sqlite_url(env_url, REPO_ROOT)


DATABASE_URL = raffle_database_url()
# alembic.ini is read through ConfigParser, which interpolates "%"
config.set_main_option("sqlalchemy.url", DATABASE_URL.replace("%", "%%"))


def _compare_options() -> dict[str, Any]:
    # assigned_number and week_number type changes should show up in autogenerate
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "compare_server_default": True,
    }


def migrate_offline() -> None:
    """Emit the migration SQL for ``DATABASE_URL`` without connecting."""
    context.configure(
        url=DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_compare_options(),
    )
    with context.begin_transaction():
        context.run_migrations()


def migrate_online() -> None:
    """Apply migrations through the same engine factory the app uses."""
    engine = make_engine(database_url=DATABASE_URL)
    try:
        with engine.connect() as connection:
            # SQLite needs batch mode to alter the sign_ins/drawings foreign keys
            context.configure(
                connection=connection,
                render_as_batch=connection.dialect.name == "sqlite",
                **_compare_options(),
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    migrate_offline()
else:
    migrate_online()
