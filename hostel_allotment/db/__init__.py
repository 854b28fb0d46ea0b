"""Engine, session and schema lifecycle helpers."""

from hostel_allotment.db.init_db import drop_db, init_db, reset_db
from hostel_allotment.db.session import build_engine, build_session_factory, get_engine

__all__ = [
    "build_engine",
    "build_session_factory",
    "get_engine",
    "init_db",
    "drop_db",
    "reset_db",
]
