"""
API v1 Router - Main Entry Point
Aggregates all v1 endpoints of the allotment service
"""
from fastapi import APIRouter, Depends

from hostel_allotment.api.v1 import allotments, reports, rooms
from hostel_allotment.dependencies import get_backend
from hostel_allotment.persistence.base import PersistenceBackend

router = APIRouter(
    responses={
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(allotments.router)
router.include_router(rooms.router)
router.include_router(reports.router)


@router.get("/health", tags=["Health"])
def health(backend: PersistenceBackend = Depends(get_backend)):
    return {
        "status": "ok",
        "backend": backend.name,
        "transactional": backend.transactional,
    }
