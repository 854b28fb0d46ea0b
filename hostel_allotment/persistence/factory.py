# hostel_allotment/persistence/factory.py
"""Build the configured persistence backend."""
from __future__ import annotations

from typing import Optional

from hostel_allotment.config.settings import Settings, get_settings
from hostel_allotment.core.exceptions import ConfigurationError
from hostel_allotment.core.logging import get_logger
from hostel_allotment.db.session import build_engine
from hostel_allotment.persistence.base import PersistenceBackend
from hostel_allotment.persistence.rest import RestBackend
from hostel_allotment.persistence.sql import SqlBackend

logger = get_logger(__name__)


def create_backend(settings: Optional[Settings] = None) -> PersistenceBackend:
    """
    Create the backend selected by ``PERSISTENCE_BACKEND``.

    Raises:
        ConfigurationError: If the REST backend is selected without REST_URL
    """
    settings = settings or get_settings()

    if settings.PERSISTENCE_BACKEND == "rest":
        if not settings.REST_URL:
            raise ConfigurationError("REST_URL is required when PERSISTENCE_BACKEND=rest")
        logger.info("Using REST table backend", extra={"rest_url": settings.REST_URL})
        return RestBackend(
            settings.REST_URL,
            api_key=settings.REST_API_KEY,
            timeout=settings.REST_TIMEOUT,
        )

    backend = SqlBackend.from_engine(build_engine(settings.get_database_url()))
    logger.info("Using SQL backend", extra={"dialect": backend.engine.dialect.name})
    return backend
