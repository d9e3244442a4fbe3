# clinidash/create_tables.py
"""Create (or with --drop, rebuild) the schema without going through alembic.

Handy for local SQLite databases; deployed databases use `alembic upgrade head`.
"""
import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

# Allow running from the clinidash/ directory without PYTHONPATH tweaks
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

ENV_PATH = ROOT_DIR / "clinidash" / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH, override=True)

from clinidash.db.session import Base, engine
from clinidash.models import patient  # noqa: F401  registers the mappers


def reset_schema(target_engine=engine, drop: bool = False) -> list:
    """Create missing tables, dropping everything first when `drop` is set; returns table names."""
    if drop:
        Base.metadata.drop_all(bind=target_engine)
    Base.metadata.create_all(bind=target_engine)
    return sorted(Base.metadata.tables)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create the clinidash tables.")
    parser.add_argument("--drop", action="store_true", help="drop all tables (and their data) first")
    args = parser.parse_args(argv)

    print(f"Using {engine.url.render_as_string(hide_password=True)}")
    tables = reset_schema(drop=args.drop)
    print(f"{'Rebuilt' if args.drop else 'Created'} tables: {', '.join(tables)}")


if __name__ == "__main__":
    main()
