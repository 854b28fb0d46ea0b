"""
Occupancy arithmetic shared by the allotment manager and the room directory.

Pure functions over records; nothing here touches storage.
"""

from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Sequence

from hostel_allotment.models.enums import RoomStatus
from hostel_allotment.schemas.records import AllotmentRecord, HostelRecord, RoomRecord
from hostel_allotment.schemas.report import HostelOccupancyReport

_TWO_PLACES = Decimal("0.01")


def derive_room_status(room: RoomRecord, active_count: int) -> RoomStatus:
    """
    Status a room should carry for ``active_count`` Active allotments.

    Under Maintenance is an administrative label and always wins.
    """
    if room.status == RoomStatus.UNDER_MAINTENANCE:
        return RoomStatus.UNDER_MAINTENANCE
    if active_count >= room.capacity:
        return RoomStatus.OCCUPIED
    return RoomStatus.VACANT


def occupancy_percentage(active_students: int, total_capacity: int) -> float:
    """Percent of beds taken, rounded half-up to two places; 0 for no capacity."""
    if total_capacity <= 0:
        return 0.0
    ratio = Decimal(active_students) * 100 / Decimal(total_capacity)
    return float(ratio.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def active_counts(allotments: Iterable[AllotmentRecord]) -> Dict[int, int]:
    """Active allotments per room id."""
    return dict(Counter(allotment.room_id for allotment in allotments))


def build_occupancy_report(
    hostels: Sequence[HostelRecord],
    rooms: Sequence[RoomRecord],
    active: Sequence[AllotmentRecord],
) -> List[HostelOccupancyReport]:
    """
    Aggregate rooms and Active allotments per hostel, ordered by hostel name.

    ``active`` must hold only Active allotments.
    """
    per_room = active_counts(active)
    rooms_by_hostel: Dict[int, List[RoomRecord]] = {}
    for room in rooms:
        rooms_by_hostel.setdefault(room.hostel_id, []).append(room)

    reports = []
    for hostel in sorted(hostels, key=lambda h: (h.hostel_name, h.hostel_id)):
        hostel_rooms = rooms_by_hostel.get(hostel.hostel_id, [])
        statuses = Counter(room.status for room in hostel_rooms)
        total_capacity = sum(room.capacity for room in hostel_rooms)
        current_students = sum(per_room.get(room.room_id, 0) for room in hostel_rooms)

        reports.append(
            HostelOccupancyReport(
                hostel_id=hostel.hostel_id,
                hostel_name=hostel.hostel_name,
                hostel_type=hostel.hostel_type,
                total_rooms=len(hostel_rooms),
                vacant_rooms=statuses[RoomStatus.VACANT],
                occupied_rooms=statuses[RoomStatus.OCCUPIED],
                maintenance_rooms=statuses[RoomStatus.UNDER_MAINTENANCE],
                total_capacity=total_capacity,
                current_students=current_students,
                occupancy_percentage=occupancy_percentage(current_students, total_capacity),
            )
        )
    return reports


__all__ = [
    "derive_room_status",
    "occupancy_percentage",
    "active_counts",
    "build_occupancy_report",
]
