"""Database engine and session management."""
from functools import lru_cache
from typing import Any, Dict

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from hostel_allotment.config.settings import settings


def _enable_sqlite_write_serialization(engine: Engine) -> None:
    """
    Make every SQLite transaction take the write lock when it begins.

    pysqlite defers BEGIN until the first write, which lets two transactions
    read the same occupancy count before either writes. Emitting
    ``BEGIN IMMEDIATE`` ourselves serializes writers for the whole
    check-then-write sequence.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str, **overrides: Any) -> Engine:
    """
    Create an engine for the given URL with the service's pool settings.

    SQLite URLs get a busy timeout and immediate transactions; every other
    dialect gets the configured connection pool.
    """
    options: Dict[str, Any] = {"pool_pre_ping": True, "echo": settings.DB_ECHO}

    if database_url.startswith("sqlite"):
        options["connect_args"] = {
            "check_same_thread": False,
            "timeout": settings.DB_BUSY_TIMEOUT,
        }
    else:
        options["pool_size"] = settings.DB_POOL_SIZE
        options["max_overflow"] = settings.DB_POOL_OVERFLOW

    options.update(overrides)
    engine = create_engine(database_url, **options)

    if engine.dialect.name == "sqlite":
        _enable_sqlite_write_serialization(engine)

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@lru_cache()
def get_engine() -> Engine:
    """Process-wide engine built from settings."""
    return build_engine(settings.get_database_url())

