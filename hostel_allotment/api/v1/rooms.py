"""Room directory endpoints."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from hostel_allotment.core.exceptions import RoomNotFoundError
from hostel_allotment.dependencies import get_allotment_manager, get_room_directory
from hostel_allotment.models.enums import HostelType, RoomStatus
from hostel_allotment.schemas.records import RoomRecord
from hostel_allotment.schemas.room import (
    MaintenanceUpdate,
    RoomOccupancy,
    RoomSearchFilter,
    RoomWithOccupants,
)
from hostel_allotment.services.allotment_service import AllotmentManager
from hostel_allotment.services.room_directory import RoomDirectory

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.get("/available", response_model=List[RoomOccupancy])
def list_available_rooms(
    hostel_type: Optional[HostelType] = Query(default=None),
    directory: RoomDirectory = Depends(get_room_directory),
):
    """Vacant rooms that still have a free bed."""
    return directory.find_available(hostel_type)


@router.get("/search", response_model=List[RoomOccupancy])
def search_rooms(
    hostel_id: Optional[int] = Query(default=None, gt=0),
    room_status: Optional[RoomStatus] = Query(default=None, alias="status"),
    hostel_type: Optional[HostelType] = Query(default=None),
    room_no: Optional[str] = Query(default=None, max_length=20),
    directory: RoomDirectory = Depends(get_room_directory),
):
    filters = RoomSearchFilter(
        hostel_id=hostel_id,
        status=room_status,
        hostel_type=hostel_type,
        room_no=room_no,
    )
    return directory.search(filters)


@router.get("/{room_id}", response_model=RoomWithOccupants)
def get_room(
    room_id: int,
    directory: RoomDirectory = Depends(get_room_directory),
):
    room = directory.find_with_occupants(room_id)
    if room is None:
        raise RoomNotFoundError(room_id)
    return room


@router.put("/{room_id}/maintenance", response_model=RoomRecord)
def set_room_maintenance(
    room_id: int,
    payload: MaintenanceUpdate,
    directory: RoomDirectory = Depends(get_room_directory),
) -> RoomRecord:
    return directory.set_maintenance(room_id, payload.under_maintenance)


@router.post("/{room_id}/recompute-status", response_model=RoomRecord)
def recompute_room_status(
    room_id: int,
    manager: AllotmentManager = Depends(get_allotment_manager),
) -> RoomRecord:
    """Repair the room label from its Active allotments."""
    return manager.recompute_room_status(room_id)
