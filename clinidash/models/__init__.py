# clinidash/models/__init__.py
from clinidash.db.session import Base, engine, SessionLocal

# Import model modules so SQLAlchemy registers all mappers.
from . import patient  # noqa: F401


def init_db() -> None:
    """Create tables if they don't exist."""
    Base.metadata.create_all(bind=engine)
