"""ORM models for the allotment schema."""

from hostel_allotment.models.base import Base, TimestampMixin
from hostel_allotment.models.enums import AllotmentStatus, HostelType, RoomStatus
from hostel_allotment.models.hostel import Hostel
from hostel_allotment.models.room import Room
from hostel_allotment.models.room_allotment import RoomAllotment
from hostel_allotment.models.student import Student

__all__ = [
    "Base",
    "TimestampMixin",
    "AllotmentStatus",
    "HostelType",
    "RoomStatus",
    "Hostel",
    "Room",
    "RoomAllotment",
    "Student",
]
