# --- File: hostel_allotment/schemas/records.py ---
"""
Typed rows exchanged between the persistence backends and the services.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field

from hostel_allotment.models.enums import AllotmentStatus, HostelType, RoomStatus
from hostel_allotment.schemas.base import BaseRecord

__all__ = [
    "HostelRecord",
    "RoomRecord",
    "StudentRecord",
    "AllotmentRecord",
]


class HostelRecord(BaseRecord):
    hostel_id: int
    hostel_name: str
    hostel_type: HostelType
    location: Optional[str] = None
    total_rooms: int = 0
    warden_id: Optional[int] = None


class RoomRecord(BaseRecord):
    room_id: int
    hostel_id: int
    room_no: str
    capacity: int = Field(..., gt=0)
    status: RoomStatus

    @property
    def is_under_maintenance(self) -> bool:
        return self.status == RoomStatus.UNDER_MAINTENANCE


class StudentRecord(BaseRecord):
    student_id: int
    user_id: Optional[int] = None
    name: str
    reg_no: str
    year_of_study: Optional[int] = None
    department: Optional[str] = None


class AllotmentRecord(BaseRecord):
    allotment_id: int
    student_id: int
    room_id: int
    allotment_date: date
    status: AllotmentStatus
    vacated_date: Optional[date] = None
