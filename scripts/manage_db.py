"""Database maintenance: apply migrations, list tables, detect schema drift.

Usage::

    python scripts/manage_db.py upgrade [--revision REV]
    python scripts/manage_db.py tables
    python scripts/manage_db.py drift
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from alembic import command
from alembic.autogenerate import api as ag_api
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import func, inspect, select

from luckydraw.db.engine import make_engine
from luckydraw.models import Base

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _alembic_config() -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return cfg


def upgrade(revision: str) -> int:
    command.upgrade(_alembic_config(), revision)
    return show_tables()


def show_tables() -> int:
    """Print each application table with its row count."""
    engine = make_engine()
    existing = set(inspect(engine).get_table_names())
    with engine.connect() as conn:
        for table in Base.metadata.sorted_tables:
            if table.name not in existing:
                print(f"{table.name}: missing")
                continue
            count = conn.scalar(select(func.count()).select_from(table))
            print(f"{table.name}: {count} rows")
    return 0


def _print_ops(ops, indent: int = 0) -> None:
    for op in ops:
        print(f"{'  ' * indent}- {op}")
        sub_ops = getattr(op, "ops", None)
        if sub_ops:
            _print_ops(sub_ops, indent + 1)


def check_drift() -> int:
    """Compare the live schema with the models; 0 = clean, 1 = drift, 2 = error."""
    engine = make_engine()
    url_display = engine.url.render_as_string(hide_password=True)
    try:
        with engine.connect() as connection:
            context = MigrationContext.configure(
                connection=connection,
                opts={
                    "compare_type": True,
                    "render_as_batch": connection.dialect.name == "sqlite",
                },
            )
            upgrade_ops = ag_api.produce_migrations(context, Base.metadata).upgrade_ops
    except Exception as exc:
        print(f"Schema drift check: ERROR for {url_display}: {exc}", file=sys.stderr)
        return 2

    if upgrade_ops is None or upgrade_ops.is_empty():
        print(f"Schema drift check: OK for {url_display}.")
        return 0
    print(f"Schema drift check: FAILED for {url_display}. Differences detected:")
    _print_ops(upgrade_ops.ops or [])
    return 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    sub = parser.add_subparsers(dest="command", required=True)
    up = sub.add_parser("upgrade", help="apply Alembic migrations")
    up.add_argument("--revision", default="head")
    sub.add_parser("tables", help="list tables and row counts")
    sub.add_parser("drift", help="compare the database with the models")
    args = parser.parse_args(argv)

    if args.command == "upgrade":
        return upgrade(args.revision)
    if args.command == "tables":
        return show_tables()
    return check_drift()


if __name__ == "__main__":
    raise SystemExit(main())
