# --- File: hostel_allotment/schemas/report.py ---
"""
Occupancy report schemas.
"""

from __future__ import annotations

from pydantic import Field

from hostel_allotment.models.enums import HostelType
from hostel_allotment.schemas.base import BaseSchema

__all__ = ["HostelOccupancyReport"]


class HostelOccupancyReport(BaseSchema):
    """Per-hostel occupancy aggregate."""

    hostel_id: int
    hostel_name: str
    hostel_type: HostelType
    total_rooms: int = 0
    vacant_rooms: int = 0
    occupied_rooms: int = 0
    maintenance_rooms: int = 0
    total_capacity: int = 0
    current_students: int = 0
    occupancy_percentage: float = Field(
        default=0.0,
        description="Active students over total capacity, percent, 2 decimals",
    )
