# hostel_allotment/dependencies.py
"""
FastAPI dependency providers.

The backend is created once per application in ``create_app`` and kept on
``app.state``; services are thin and built lazily on first use.
"""
from __future__ import annotations

from fastapi import HTTPException, Request, status

from hostel_allotment.config.settings import get_settings
from hostel_allotment.persistence.base import PersistenceBackend
from hostel_allotment.services.allotment_service import AllotmentManager
from hostel_allotment.services.room_directory import RoomDirectory


def get_backend(request: Request) -> PersistenceBackend:
    backend = getattr(request.app.state, "backend", None)
    if backend is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Persistence backend is not initialized",
        )
    return backend


def get_allotment_manager(request: Request) -> AllotmentManager:
    manager = getattr(request.app.state, "allotment_manager", None)
    if manager is None:
        settings = getattr(request.app.state, "settings", None) or get_settings()
        manager = AllotmentManager(get_backend(request), settings=settings)
        request.app.state.allotment_manager = manager
    return manager


def get_room_directory(request: Request) -> RoomDirectory:
    directory = getattr(request.app.state, "room_directory", None)
    if directory is None:
        directory = RoomDirectory(get_backend(request))
        request.app.state.room_directory = directory
    return directory
