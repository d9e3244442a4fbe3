from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy import create_engine, event
import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clinidash.db")
SQL_ECHO = (os.getenv("SQL_ECHO", "false") or "false").lower() in {"1", "true", "yes", "on"}

_engine_kwargs = {"echo": SQL_ECHO, "future": True, "pool_pre_ping": True}
if DATABASE_URL.startswith("sqlite"):
    _engine_kwargs["connect_args"] = {"check_same_thread": False}
elif DATABASE_URL.startswith("postgresql") and "sslmode=" not in DATABASE_URL.lower():
    # Hosted Postgres instances generally require SSL
    _engine_kwargs["connect_args"] = {"sslmode": "require"}

engine = create_engine(DATABASE_URL, **_engine_kwargs)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def enable_sqlite_foreign_keys(target_engine) -> None:
    """SQLite ignores ON DELETE CASCADE unless the pragma is set per connection."""
    if target_engine.dialect.name != "sqlite":
        return

    @event.listens_for(target_engine, "connect")
    def _set_pragma(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


enable_sqlite_foreign_keys(engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
