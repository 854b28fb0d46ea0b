# --- File: hostel_allotment/schemas/room.py ---
"""
Room directory schemas: setup payloads, occupancy views and filters.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import Field

from hostel_allotment.models.enums import HostelType, RoomStatus
from hostel_allotment.schemas.base import BaseCreateSchema, BaseFilterSchema, BaseSchema
from hostel_allotment.schemas.records import RoomRecord

__all__ = [
    "HostelCreate",
    "RoomCreate",
    "StudentCreate",
    "MaintenanceUpdate",
    "RoomSearchFilter",
    "RoomOccupancy",
    "Occupant",
    "RoomWithOccupants",
]


class HostelCreate(BaseCreateSchema):
    hostel_name: str = Field(..., min_length=1, max_length=100)
    hostel_type: HostelType
    location: Optional[str] = Field(default=None, max_length=200)
    total_rooms: int = Field(default=0, ge=0)
    warden_id: Optional[int] = None


class RoomCreate(BaseCreateSchema):
    hostel_id: int = Field(..., gt=0)
    room_no: str = Field(
        ...,
        min_length=1,
        max_length=20,
        description="Room number/identifier (e.g., '101', 'A-201')",
    )
    capacity: int = Field(..., gt=0, le=20)
    status: RoomStatus = RoomStatus.VACANT


class StudentCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=100)
    reg_no: str = Field(..., min_length=1, max_length=30)
    user_id: Optional[int] = None
    year_of_study: Optional[int] = Field(default=None, ge=1, le=10)
    department: Optional[str] = Field(default=None, max_length=100)


class MaintenanceUpdate(BaseSchema):
    under_maintenance: bool


class RoomSearchFilter(BaseFilterSchema):
    hostel_id: Optional[int] = None
    status: Optional[RoomStatus] = None
    hostel_type: Optional[HostelType] = None
    room_no: Optional[str] = Field(
        default=None,
        description="Case-insensitive substring of the room number",
    )


class RoomOccupancy(RoomRecord):
    """Room with its live occupancy figures."""

    hostel_name: Optional[str] = None
    hostel_type: Optional[HostelType] = None
    current_occupants: int = 0
    available_spots: int = 0


class Occupant(BaseSchema):
    student_id: int
    name: Optional[str] = None
    reg_no: Optional[str] = None
    year_of_study: Optional[int] = None
    department: Optional[str] = None
    allotment_id: int
    allotment_date: date


class RoomWithOccupants(RoomOccupancy):
    location: Optional[str] = None
    occupants: List[Occupant] = Field(default_factory=list)
