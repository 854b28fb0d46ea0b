from __future__ import annotations

import pytest

from hostel_allotment.core.exceptions import DuplicateEntryError, HostelNotFoundError, RoomNotFoundError
from hostel_allotment.models.enums import HostelType, RoomStatus
from hostel_allotment.schemas.room import RoomCreate, RoomSearchFilter


def test_find_available_excludes_full_and_maintenance(manager, directory, seeded):
    manager.allocate(seeded.students[0], seeded.single.room_id)
    directory.set_maintenance(seeded.triple.room_id, True)

    available = directory.find_available()

    assert [room.room_no for room in available] == ["101"]
    assert available[0].available_spots == 2


def test_find_available_by_hostel_type(directory, seeded):
    girls = directory.find_available(HostelType.GIRLS)

    assert [room.room_id for room in girls] == [seeded.triple.room_id]
    assert girls[0].hostel_name == "Aravali"


def test_rooms_ordered_by_hostel_then_number(directory, seeded):
    rooms = directory.search()

    assert [(room.hostel_name, room.room_no) for room in rooms] == [
        ("Aravali", "A-201"),
        ("North Block", "101"),
        ("North Block", "102"),
    ]


def test_search_room_number_is_case_insensitive_substring(directory, seeded):
    rooms = directory.search(RoomSearchFilter(room_no="a-2"))

    assert [room.room_id for room in rooms] == [seeded.triple.room_id]


def test_search_by_hostel_and_status(manager, directory, seeded):
    manager.allocate(seeded.students[0], seeded.single.room_id)

    occupied = directory.search(
        RoomSearchFilter(hostel_id=seeded.north.hostel_id, status=RoomStatus.OCCUPIED)
    )

    assert [room.room_no for room in occupied] == ["102"]
    assert occupied[0].current_occupants == 1
    assert occupied[0].available_spots == 0


def test_find_with_occupants(manager, directory, seeded):
    manager.allocate(seeded.students[0], seeded.double.room_id)

    room = directory.find_with_occupants(seeded.double.room_id)

    assert room.location == "North Campus"
    assert room.current_occupants == 1
    assert [o.reg_no for o in room.occupants] == ["REG001"]
    assert directory.find_with_occupants(4040) is None


def test_has_available_space(manager, directory, seeded):
    assert directory.has_available_space(seeded.single.room_id)

    manager.allocate(seeded.students[0], seeded.single.room_id)

    assert not directory.has_available_space(seeded.single.room_id)
    assert not directory.has_available_space(4040)


def test_leaving_maintenance_recomputes_from_occupancy(manager, directory, seeded):
    room_id = seeded.double.room_id
    manager.allocate(seeded.students[0], room_id)
    manager.allocate(seeded.students[1], room_id)

    assert directory.set_maintenance(room_id, True).status == RoomStatus.UNDER_MAINTENANCE
    assert directory.set_maintenance(room_id, False).status == RoomStatus.OCCUPIED


def test_set_maintenance_unknown_room(directory, seeded):
    with pytest.raises(RoomNotFoundError):
        directory.set_maintenance(4040, True)


def test_create_room_validation(directory, seeded):
    with pytest.raises(HostelNotFoundError):
        directory.create_room(RoomCreate(hostel_id=999, room_no="1", capacity=1))

    with pytest.raises(DuplicateEntryError):
        directory.create_room(RoomCreate(hostel_id=seeded.north.hostel_id, room_no="101", capacity=2))


def test_set_room_status(directory, seeded):
    room = directory.set_room_status(seeded.single.room_id, RoomStatus.OCCUPIED)

    assert room.status == RoomStatus.OCCUPIED
    with pytest.raises(RoomNotFoundError):
        directory.set_room_status(4040, RoomStatus.VACANT)
