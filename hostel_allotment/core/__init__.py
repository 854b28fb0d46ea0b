"""Core application modules: exceptions, logging and HTTP middleware."""

from .exceptions import BaseAppException, ConflictError, NotFoundError, PersistenceError
from .logging import get_logger, setup_logging

__all__ = [
    "BaseAppException",
    "ConflictError",
    "NotFoundError",
    "PersistenceError",
    "get_logger",
    "setup_logging",
]
