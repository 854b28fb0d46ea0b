# hostel_allotment/services/room_directory.py
"""
Room and hostel directory: room lookups with live occupancy figures,
maintenance flagging and the setup helpers used to seed hostels, rooms and
students.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from hostel_allotment.core.exceptions import HostelNotFoundError
from hostel_allotment.core.logging import get_logger
from hostel_allotment.models.enums import HostelType, RoomStatus
from hostel_allotment.persistence.base import PersistenceBackend, UnitOfWork
from hostel_allotment.repositories import (
    AllotmentRepository,
    HostelRepository,
    RoomRepository,
    StudentRepository,
)
from hostel_allotment.schemas.records import HostelRecord, RoomRecord, StudentRecord
from hostel_allotment.schemas.room import (
    HostelCreate,
    Occupant,
    RoomCreate,
    RoomOccupancy,
    RoomSearchFilter,
    RoomWithOccupants,
    StudentCreate,
)
from hostel_allotment.services.occupancy import active_counts, derive_room_status

logger = get_logger(__name__)


class RoomDirectory:
    """
    Read and administer rooms.

    Status labels driven by occupancy belong to ``AllotmentManager``; the
    directory only writes them for maintenance toggles and explicit
    ``set_room_status`` calls.
    """

    def __init__(self, backend: PersistenceBackend) -> None:
        self._backend = backend

    # ------------------------------------------------------------------ #
    # Room lookups
    # ------------------------------------------------------------------ #
    def get_room(self, room_id: int) -> Optional[RoomRecord]:
        with self._backend.unit_of_work(read_only=True) as uow:
            return uow.get_repo(RoomRepository).find_by_id(room_id)

    def set_room_status(self, room_id: int, status: RoomStatus) -> RoomRecord:
        """
        Overwrite the room label.

        Raises:
            RoomNotFoundError: Unknown room
        """
        with self._backend.unit_of_work() as uow:
            return uow.get_repo(RoomRepository).set_status(room_id, status)

    def find_by_hostel(self, hostel_id: int) -> List[RoomOccupancy]:
        with self._backend.unit_of_work(read_only=True) as uow:
            rooms = uow.get_repo(RoomRepository).find_by_hostel(hostel_id)
            return self._with_occupancy(uow, rooms)

    def find_by_status(self, status: RoomStatus) -> List[RoomOccupancy]:
        with self._backend.unit_of_work(read_only=True) as uow:
            rooms = uow.get_repo(RoomRepository).find_by_status(status)
            return self._with_occupancy(uow, rooms)

    def find_available(self, hostel_type: Optional[HostelType] = None) -> List[RoomOccupancy]:
        """Vacant rooms with at least one free bed, optionally of one hostel type."""
        with self._backend.unit_of_work(read_only=True) as uow:
            rooms = uow.get_repo(RoomRepository).find_by_status(RoomStatus.VACANT)
            candidates = self._with_occupancy(uow, rooms)

        return [
            room for room in candidates
            if room.available_spots > 0
            and (hostel_type is None or room.hostel_type == hostel_type)
        ]

    def search(self, filters: Optional[RoomSearchFilter] = None) -> List[RoomOccupancy]:
        """
        Filter rooms by hostel, status, hostel type and room number.

        The room number filter is a case-insensitive substring match.
        """
        filters = filters or RoomSearchFilter()
        criteria = {}
        if filters.hostel_id is not None:
            criteria["hostel_id"] = filters.hostel_id
        if filters.status is not None:
            criteria["status"] = filters.status

        with self._backend.unit_of_work(read_only=True) as uow:
            rooms = uow.get_repo(RoomRepository).find_by_criteria(criteria)
            results = self._with_occupancy(uow, rooms)

        if filters.hostel_type is not None:
            results = [room for room in results if room.hostel_type == filters.hostel_type]
        if filters.room_no:
            needle = filters.room_no.lower()
            results = [room for room in results if needle in room.room_no.lower()]
        return results

    def find_with_occupants(self, room_id: int) -> Optional[RoomWithOccupants]:
        """Room with the students currently holding an Active allotment in it."""
        with self._backend.unit_of_work(read_only=True) as uow:
            room = uow.get_repo(RoomRepository).find_by_id(room_id)
            if room is None:
                return None

            active = uow.get_repo(AllotmentRepository).find_active_for_rooms([room_id])
            students = uow.get_repo(StudentRepository).map_by_id([a.student_id for a in active])
            hostel = uow.get_repo(HostelRepository).find_by_id(room.hostel_id)

        occupants = []
        for allotment in active:
            student = students.get(allotment.student_id)
            occupants.append(
                Occupant(
                    student_id=allotment.student_id,
                    name=student.name if student else None,
                    reg_no=student.reg_no if student else None,
                    year_of_study=student.year_of_study if student else None,
                    department=student.department if student else None,
                    allotment_id=allotment.allotment_id,
                    allotment_date=allotment.allotment_date,
                )
            )

        return RoomWithOccupants(
            **room.model_dump(),
            hostel_name=hostel.hostel_name if hostel else None,
            hostel_type=hostel.hostel_type if hostel else None,
            location=hostel.location if hostel else None,
            current_occupants=len(occupants),
            available_spots=max(room.capacity - len(occupants), 0),
            occupants=occupants,
        )

    def has_available_space(self, room_id: int) -> bool:
        """True when the room is Vacant and has a free bed; False for unknown rooms."""
        with self._backend.unit_of_work(read_only=True) as uow:
            room = uow.get_repo(RoomRepository).find_by_id(room_id)
            if room is None or room.status != RoomStatus.VACANT:
                return False
            return uow.get_repo(AllotmentRepository).count_active_for_room(room_id) < room.capacity

    # ------------------------------------------------------------------ #
    # Administration
    # ------------------------------------------------------------------ #
    def set_maintenance(self, room_id: int, under_maintenance: bool) -> RoomRecord:
        """
        Put a room under maintenance or bring it back.

        Entering maintenance ignores occupancy. Leaving it derives the label
        from the Active allotments, inside the same unit of work.

        Raises:
            RoomNotFoundError: Unknown room
        """
        with self._backend.unit_of_work() as uow:
            rooms = uow.get_repo(RoomRepository)
            room = rooms.get_by_id(room_id, lock=True)

            if under_maintenance:
                target = RoomStatus.UNDER_MAINTENANCE
            else:
                occupants = uow.get_repo(AllotmentRepository).count_active_for_room(room_id)
                released = room.model_copy(update={"status": RoomStatus.VACANT})
                target = derive_room_status(released, occupants)

            if target == room.status:
                return room
            room = rooms.set_status(room_id, target)

        logger.info(
            "Room maintenance flag changed",
            extra={"room_id": room_id, "under_maintenance": under_maintenance},
        )
        return room

    def create_hostel(self, payload: HostelCreate) -> HostelRecord:
        with self._backend.unit_of_work() as uow:
            hostel = uow.get_repo(HostelRepository).create(payload.model_dump())
        logger.info("Hostel created", extra={"hostel_id": hostel.hostel_id})
        return hostel

    def create_room(self, payload: RoomCreate) -> RoomRecord:
        """
        Add a room to an existing hostel.

        Raises:
            HostelNotFoundError: Unknown hostel
            DuplicateEntryError: Room number already used in the hostel
        """
        with self._backend.unit_of_work() as uow:
            if uow.get_repo(HostelRepository).find_by_id(payload.hostel_id) is None:
                raise HostelNotFoundError(payload.hostel_id)
            room = uow.get_repo(RoomRepository).create(payload.model_dump())
        logger.info("Room created", extra={"room_id": room.room_id, "hostel_id": room.hostel_id})
        return room

    def create_student(self, payload: StudentCreate) -> StudentRecord:
        with self._backend.unit_of_work() as uow:
            student = uow.get_repo(StudentRepository).create(payload.model_dump())
        logger.info("Student created", extra={"student_id": student.student_id})
        return student

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _with_occupancy(uow: UnitOfWork, rooms: Iterable[RoomRecord]) -> List[RoomOccupancy]:
        """Attach hostel names and Active counts, ordered by hostel name then room number."""
        rooms = list(rooms)
        hostels: Dict[int, HostelRecord] = uow.get_repo(HostelRepository).map_by_id(
            [room.hostel_id for room in rooms]
        )
        counts = active_counts(
            uow.get_repo(AllotmentRepository).find_active_for_rooms([room.room_id for room in rooms])
        )

        results = []
        for room in rooms:
            hostel = hostels.get(room.hostel_id)
            occupants = counts.get(room.room_id, 0)
            results.append(
                RoomOccupancy(
                    **room.model_dump(),
                    hostel_name=hostel.hostel_name if hostel else None,
                    hostel_type=hostel.hostel_type if hostel else None,
                    current_occupants=occupants,
                    available_spots=max(room.capacity - occupants, 0),
                )
            )
        return sorted(results, key=lambda r: (r.hostel_name or "", r.room_no))


__all__ = ["RoomDirectory"]
