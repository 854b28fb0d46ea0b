# --- File: hostel_allotment/schemas/allotment.py ---
"""
Allotment request and response schemas.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field

from hostel_allotment.models.enums import HostelType
from hostel_allotment.schemas.base import BaseCreateSchema, BaseSchema
from hostel_allotment.schemas.records import AllotmentRecord

__all__ = [
    "AllocateRequest",
    "ApplyRequest",
    "VacateRequest",
    "AllotmentDetail",
]


class AllocateRequest(BaseCreateSchema):
    """Direct allocation of a student to a room."""

    student_id: int = Field(..., gt=0, description="Student to allocate")
    room_id: int = Field(..., gt=0, description="Target room")


class ApplyRequest(BaseCreateSchema):
    """Application for a room, approved later by a warden."""

    student_id: int = Field(..., gt=0)
    room_id: int = Field(..., gt=0)


class VacateRequest(BaseSchema):
    vacated_date: Optional[date] = Field(
        default=None,
        description="Date the student left; defaults to today",
    )


class AllotmentDetail(AllotmentRecord):
    """
    Allotment joined with its room, hostel and student.

    Join fields are optional because the referenced rows are owned by other
    directories and may be missing from a partial read.
    """

    room_no: Optional[str] = None
    capacity: Optional[int] = None
    hostel_id: Optional[int] = None
    hostel_name: Optional[str] = None
    hostel_type: Optional[HostelType] = None
    location: Optional[str] = None
    student_name: Optional[str] = None
    reg_no: Optional[str] = None
    year_of_study: Optional[int] = None
    department: Optional[str] = None
