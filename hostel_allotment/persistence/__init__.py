"""
Storage adapters behind one persistence contract.

- ``SqlBackend``: SQLAlchemy sessions, one transaction per unit of work
- ``RestBackend``: PostgREST table client, serialized per process
"""

from hostel_allotment.persistence.base import (
    ALLOTMENTS,
    HOSTELS,
    ROOMS,
    STUDENTS,
    PersistenceBackend,
    TableSpec,
    UnitOfWork,
)
from hostel_allotment.persistence.factory import create_backend
from hostel_allotment.persistence.rest import RestBackend
from hostel_allotment.persistence.sql import SqlBackend

__all__ = [
    "ALLOTMENTS",
    "HOSTELS",
    "ROOMS",
    "STUDENTS",
    "PersistenceBackend",
    "TableSpec",
    "UnitOfWork",
    "create_backend",
    "RestBackend",
    "SqlBackend",
]
