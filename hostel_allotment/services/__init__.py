"""
Service layer.

- AllotmentManager: allotment lifecycle and room status recomputation
- RoomDirectory: room lookups, maintenance and setup helpers
"""

from hostel_allotment.services.allotment_service import AllotmentManager
from hostel_allotment.services.occupancy import (
    build_occupancy_report,
    derive_room_status,
    occupancy_percentage,
)
from hostel_allotment.services.room_directory import RoomDirectory

__all__ = [
    "AllotmentManager",
    "RoomDirectory",
    "build_occupancy_report",
    "derive_room_status",
    "occupancy_percentage",
]
