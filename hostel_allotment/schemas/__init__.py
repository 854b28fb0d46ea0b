"""Pydantic schemas for records, requests and reports."""

from hostel_allotment.schemas.allotment import (
    AllocateRequest,
    AllotmentDetail,
    ApplyRequest,
    VacateRequest,
)
from hostel_allotment.schemas.base import BaseCreateSchema, BaseFilterSchema, BaseRecord, BaseSchema
from hostel_allotment.schemas.records import (
    AllotmentRecord,
    HostelRecord,
    RoomRecord,
    StudentRecord,
)
from hostel_allotment.schemas.report import HostelOccupancyReport
from hostel_allotment.schemas.room import (
    HostelCreate,
    MaintenanceUpdate,
    Occupant,
    RoomCreate,
    RoomOccupancy,
    RoomSearchFilter,
    RoomWithOccupants,
    StudentCreate,
)

__all__ = [
    "AllocateRequest",
    "AllotmentDetail",
    "ApplyRequest",
    "VacateRequest",
    "BaseCreateSchema",
    "BaseFilterSchema",
    "BaseRecord",
    "BaseSchema",
    "AllotmentRecord",
    "HostelRecord",
    "RoomRecord",
    "StudentRecord",
    "HostelOccupancyReport",
    "HostelCreate",
    "MaintenanceUpdate",
    "Occupant",
    "RoomCreate",
    "RoomOccupancy",
    "RoomSearchFilter",
    "RoomWithOccupants",
    "StudentCreate",
]
