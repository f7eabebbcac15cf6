"""
Engines and sessions for the time tracker database.

``DATABASE_URL`` backs the running API; ``TEST_DATABASE_URL`` (in-memory
SQLite by default) backs the test suite.
"""
import os
from typing import Generator
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from .models import Base

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./time_tracker.db")
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    options = {"connect_args": {"check_same_thread": False}}
    # In-memory databases live on a single shared connection
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


engine = create_engine(DATABASE_URL, echo=SQL_ECHO, **_engine_options(DATABASE_URL))
test_engine = create_engine(TEST_DATABASE_URL, **_engine_options(TEST_DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@event.listens_for(Engine, "connect")
def enforce_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores foreign keys unless asked per connection."""
    if "sqlite" in type(dbapi_connection).__module__:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# PUBLIC_INTERFACE
def get_db() -> Generator[Session, None, None]:
    """
    Request-scoped session dependency.

    Yields:
        Session: Closed once the response is sent
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class DatabaseManager:
    """Schema setup for the API and the test suite."""

    @staticmethod
    def init_db():
        """Create any missing tables on the API database."""
        Base.metadata.create_all(bind=engine)

    @staticmethod
    def reset_test_db():
        """Give the test database an empty schema."""
        Base.metadata.drop_all(bind=test_engine)
        Base.metadata.create_all(bind=test_engine)
