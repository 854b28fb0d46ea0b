from __future__ import annotations

import pytest

from hostel_allotment.core.exceptions import HostelNotFoundError, RoomNotFoundError
from hostel_allotment.models.enums import HostelType, RoomStatus
from hostel_allotment.schemas.room import HostelCreate
from hostel_allotment.services.occupancy import occupancy_percentage


@pytest.mark.parametrize(
    "active, capacity, expected",
    [
        (0, 0, 0.0),
        (1, 3, 33.33),
        (2, 3, 66.67),
        (1, 8, 12.5),
        (1, 800, 0.13),
        (3, 3, 100.0),
    ],
)
def test_occupancy_percentage(active, capacity, expected):
    assert occupancy_percentage(active, capacity) == expected


def test_report_is_ordered_by_hostel_name(manager, directory, seeded):
    manager.allocate(seeded.students[0], seeded.single.room_id)
    manager.allocate(seeded.students[1], seeded.double.room_id)
    directory.set_maintenance(seeded.triple.room_id, True)

    report = manager.get_occupancy_report()

    assert [row.hostel_name for row in report] == ["Aravali", "North Block"]
    north = report[1]
    assert north.total_rooms == 2
    assert north.occupied_rooms == 1
    assert north.vacant_rooms == 1
    assert north.maintenance_rooms == 0
    assert north.total_capacity == 3
    assert north.current_students == 2
    assert north.occupancy_percentage == 66.67
    assert report[0].maintenance_rooms == 1


def test_report_for_hostel_without_rooms(manager, directory, seeded):
    empty = directory.create_hostel(HostelCreate(hostel_name="Annexe", hostel_type=HostelType.GIRLS))

    [row] = manager.get_occupancy_report(empty.hostel_id)

    assert row.total_capacity == 0
    assert row.occupancy_percentage == 0


def test_report_unknown_hostel(manager, seeded):
    with pytest.raises(HostelNotFoundError):
        manager.get_occupancy_report(31337)


def test_recompute_repairs_stale_label(manager, directory, seeded):
    room_id = seeded.double.room_id
    manager.allocate(seeded.students[0], room_id)
    directory.set_room_status(room_id, RoomStatus.OCCUPIED)

    repaired = manager.recompute_room_status(room_id)

    assert repaired.status == RoomStatus.VACANT
    assert manager.recompute_room_status(room_id).status == RoomStatus.VACANT


def test_recompute_keeps_maintenance(manager, directory, seeded):
    directory.set_maintenance(seeded.single.room_id, True)

    assert manager.recompute_room_status(seeded.single.room_id).status == RoomStatus.UNDER_MAINTENANCE


def test_recompute_unknown_room(manager, seeded):
    with pytest.raises(RoomNotFoundError):
        manager.recompute_room_status(4040)


def test_detail_queries(manager, seeded):
    a = manager.allocate(seeded.students[1], seeded.double.room_id)
    b = manager.allocate(seeded.students[0], seeded.double.room_id)

    active = manager.find_active_by_hostel(seeded.north.hostel_id)
    assert [row.student_name for row in active] == ["Student 1", "Student 2"]
    assert {row.allotment_id for row in active} == {a.allotment_id, b.allotment_id}

    detail = manager.find_active_by_student(seeded.students[0])
    assert detail.room_no == "101"
    assert detail.hostel_name == "North Block"
    assert detail.hostel_type == HostelType.BOYS
    assert detail.reg_no == "REG001"

    assert manager.find_active_by_student(seeded.students[5]) is None
    assert manager.find_with_details(99999) is None
