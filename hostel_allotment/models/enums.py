# hostel_allotment/models/enums.py
"""
Enumerations shared by the ORM models and the record schemas.

Values are the literal strings stored in the ``status`` and ``hostel_type``
columns, so they match rows written by other clients of the same database.
"""

import enum


class RoomStatus(str, enum.Enum):
    """Room occupancy status."""
    VACANT = "Vacant"
    OCCUPIED = "Occupied"
    UNDER_MAINTENANCE = "Under Maintenance"


class AllotmentStatus(str, enum.Enum):
    """Lifecycle state of a room allotment."""
    PENDING = "Pending"
    ACTIVE = "Active"
    VACATED = "Vacated"


class HostelType(str, enum.Enum):
    BOYS = "Boys"
    GIRLS = "Girls"
