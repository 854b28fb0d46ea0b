# hostel_allotment/db/init_db.py
"""Database initialization utilities."""
import logging
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from hostel_allotment.db.base import Base
from hostel_allotment.db.session import get_engine

logger = logging.getLogger(__name__)


def init_db(engine: Optional[Engine] = None) -> None:
    """
    Create any missing tables.

    Note: This is suitable for development/testing only.
    Production schemas are managed by migrations.
    """
    engine = engine or get_engine()
    existing_tables = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine)

    created = sorted(set(Base.metadata.tables) - existing_tables)
    if created:
        logger.info(f"Database tables created: {', '.join(created)}")
    else:
        logger.info(f"Database already initialized with {len(existing_tables)} tables")


def drop_db(engine: Optional[Engine] = None) -> None:
    """
    Drop all database tables.

    WARNING: This will delete all data! Use with caution.
    """
    Base.metadata.drop_all(bind=engine or get_engine())
    logger.warning("All database tables dropped")


def reset_db(engine: Optional[Engine] = None) -> None:
    """Drop and recreate all tables. Development/testing only."""
    logger.warning("Resetting database...")
    drop_db(engine)
    init_db(engine)
    logger.info("Database reset complete")
