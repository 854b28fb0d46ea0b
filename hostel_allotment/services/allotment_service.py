# hostel_allotment/services/allotment_service.py
"""
Allotment lifecycle: allocate, apply, approve, vacate, plus the room status
recompute step and the read-side helpers built on the same repositories.

Every state-changing operation runs its checks and writes inside one unit of
work. On the SQL backend that is one transaction in which the room row is
locked first, so two requests for the same room are serialized and a failed
check or write leaves nothing behind. The REST backend serializes write
units within the process and relies on the storage's unique index for the
one-active-allotment-per-student rule.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence

from hostel_allotment.config.settings import Settings, get_settings
from hostel_allotment.core.exceptions import (
    AllotmentNotFoundError,
    DuplicateEntryError,
    PendingApplicationExistsError,
    RoomFullError,
    RoomUnavailableError,
    StudentAlreadyAllocatedError,
)
from hostel_allotment.core.logging import get_logger
from hostel_allotment.models.enums import AllotmentStatus, RoomStatus
from hostel_allotment.persistence.base import PersistenceBackend, UnitOfWork
from hostel_allotment.repositories import (
    AllotmentRepository,
    HostelRepository,
    RoomRepository,
    StudentRepository,
)
from hostel_allotment.schemas.allotment import AllotmentDetail
from hostel_allotment.schemas.records import AllotmentRecord, RoomRecord
from hostel_allotment.schemas.report import HostelOccupancyReport
from hostel_allotment.services.occupancy import build_occupancy_report, derive_room_status

logger = get_logger(__name__)


class AllotmentManager:
    """
    Sole writer of allotment status transitions and sole trigger of room
    status recomputation.

    Args:
        backend: Persistence backend handing out units of work
        settings: Business-rule flags; process settings when omitted
        today: Clock for allotment and vacate dates
    """

    def __init__(
        self,
        backend: PersistenceBackend,
        settings: Optional[Settings] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self._backend = backend
        self._settings = settings or get_settings()
        self._today = today or date.today

    @property
    def revalidate_on_approval(self) -> bool:
        return self._settings.ALLOTMENT_REVALIDATE_ON_APPROVAL

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #
    def allocate(self, student_id: int, room_id: int) -> AllotmentRecord:
        """
        Create an Active allotment for a student in a room.

        Checks run in this order and the first failure wins: the room
        exists, it is not under maintenance, it has a free bed, and the
        student holds no Active allotment. When the new allotment fills the
        room, the room becomes Occupied in the same unit of work.

        Raises:
            RoomNotFoundError: Unknown room
            RoomUnavailableError: Room is under maintenance
            RoomFullError: Active allotments already equal capacity
            StudentAlreadyAllocatedError: Student already has an Active allotment
        """
        with self._backend.unit_of_work() as uow:
            rooms = uow.get_repo(RoomRepository)
            allotments = uow.get_repo(AllotmentRepository)

            room = rooms.get_by_id(room_id, lock=True)
            self._ensure_room_accepts_students(room, "allocate")

            occupants = allotments.count_active_for_room(room_id)
            if occupants >= room.capacity:
                self._reject("allocate", "room full", student_id=student_id, room_id=room_id)
                raise RoomFullError(room_id, room.capacity, occupants)

            if allotments.count_active_for_student(student_id) > 0:
                self._reject(
                    "allocate", "student already allocated",
                    student_id=student_id, room_id=room_id,
                )
                raise StudentAlreadyAllocatedError(student_id)

            allotment = self._insert_allotment(
                allotments, student_id, room_id, AllotmentStatus.ACTIVE
            )

            if allotments.count_active_for_room(room_id) >= room.capacity:
                rooms.set_status(room_id, RoomStatus.OCCUPIED)

        logger.info(
            "Room allocated",
            extra={
                "allotment_id": allotment.allotment_id,
                "student_id": student_id,
                "room_id": room_id,
            },
        )
        return allotment

    def apply(self, student_id: int, room_id: int) -> AllotmentRecord:
        """
        Record a Pending application for a room.

        Raises:
            RoomNotFoundError: Unknown room
            RoomUnavailableError: Room is under maintenance
            StudentNotFoundError: Unknown student
            StudentAlreadyAllocatedError: Student already has an Active allotment
            PendingApplicationExistsError: Student already has a Pending application
        """
        with self._backend.unit_of_work() as uow:
            rooms = uow.get_repo(RoomRepository)
            students = uow.get_repo(StudentRepository)
            allotments = uow.get_repo(AllotmentRepository)

            room = rooms.get_by_id(room_id, lock=True)
            self._ensure_room_accepts_students(room, "apply")

            # Serializes concurrent applications by the same student
            students.get_by_id(student_id, lock=True)

            if allotments.count_active_for_student(student_id) > 0:
                self._reject(
                    "apply", "student already allocated",
                    student_id=student_id, room_id=room_id,
                )
                raise StudentAlreadyAllocatedError(student_id)

            if allotments.find_pending_by_student(student_id) is not None:
                self._reject(
                    "apply", "pending application exists",
                    student_id=student_id, room_id=room_id,
                )
                raise PendingApplicationExistsError(student_id)

            application = self._insert_allotment(
                allotments, student_id, room_id, AllotmentStatus.PENDING
            )

        logger.info(
            "Room application recorded",
            extra={
                "allotment_id": application.allotment_id,
                "student_id": student_id,
                "room_id": room_id,
            },
        )
        return application

    def approve_pending(self, allotment_id: int) -> Optional[AllotmentRecord]:
        """
        Move a Pending allotment to Active.

        Returns None when the allotment does not exist, is not Pending, or
        was approved by a concurrent caller first.

        With ``ALLOTMENT_REVALIDATE_ON_APPROVAL`` enabled the room and
        student checks of ``allocate`` run again before the transition and
        a room filled by the approval becomes Occupied. With it disabled the
        approval is a plain status-guarded update.

        Raises:
            RoomUnavailableError: Room went under maintenance (revalidation)
            RoomFullError: Room has no free bed left (revalidation)
            StudentAlreadyAllocatedError: Student holds another Active allotment
        """
        with self._backend.unit_of_work() as uow:
            allotments = uow.get_repo(AllotmentRepository)

            if not self.revalidate_on_approval:
                pending = allotments.find_pending_by_id(allotment_id, lock=True)
                approved = (
                    self._activate(allotments, pending) if pending is not None else None
                )
            else:
                approved = self._approve_with_checks(uow, allotment_id)

        if approved is None:
            logger.warning(
                "Approval skipped: allotment is not pending",
                extra={"allotment_id": allotment_id},
            )
            return None

        logger.info(
            "Allotment approved",
            extra={
                "allotment_id": allotment_id,
                "student_id": approved.student_id,
                "room_id": approved.room_id,
            },
        )
        return approved

    def vacate(self, allotment_id: int, vacated_date: Optional[date] = None) -> AllotmentRecord:
        """
        Mark an Active allotment Vacated.

        The room goes back to Vacant only when it was Occupied and no Active
        allotment remains; a partially filled room keeps its label.

        Raises:
            AllotmentNotFoundError: No Active allotment with this id
        """
        with self._backend.unit_of_work() as uow:
            rooms = uow.get_repo(RoomRepository)
            allotments = uow.get_repo(AllotmentRepository)

            current = allotments.find_active(allotment_id)
            if current is None:
                self._reject("vacate", "active allotment not found", allotment_id=allotment_id)
                raise AllotmentNotFoundError(allotment_id, state=AllotmentStatus.ACTIVE.value)

            room = rooms.get_by_id(current.room_id, lock=True)

            vacated = allotments.mark_vacated(allotment_id, vacated_date or self._today())
            if vacated is None:
                self._reject("vacate", "allotment already vacated", allotment_id=allotment_id)
                raise AllotmentNotFoundError(allotment_id, state=AllotmentStatus.ACTIVE.value)

            if (
                room.status == RoomStatus.OCCUPIED
                and allotments.count_active_for_room(room.room_id) == 0
            ):
                rooms.set_status_if(room.room_id, RoomStatus.VACANT, expected=RoomStatus.OCCUPIED)

        logger.info(
            "Room vacated",
            extra={
                "allotment_id": allotment_id,
                "student_id": vacated.student_id,
                "room_id": vacated.room_id,
            },
        )
        return vacated

    def recompute_room_status(self, room_id: int) -> RoomRecord:
        """
        Derive the room label from its Active allotments.

        Occupied when Active allotments reach capacity, Vacant otherwise;
        Under Maintenance is left alone. Safe to repeat.

        Raises:
            RoomNotFoundError: Unknown room
        """
        with self._backend.unit_of_work() as uow:
            rooms = uow.get_repo(RoomRepository)
            allotments = uow.get_repo(AllotmentRepository)

            room = rooms.get_by_id(room_id, lock=True)
            target = derive_room_status(room, allotments.count_active_for_room(room_id))
            if target != room.status:
                room = rooms.set_status(room_id, target)
            else:
                logger.debug(f"Room {room_id} status already {target.value}")
        return room

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def find_with_details(self, allotment_id: int) -> Optional[AllotmentDetail]:
        with self._backend.unit_of_work(read_only=True) as uow:
            allotment = uow.get_repo(AllotmentRepository).find_by_id(allotment_id)
            if allotment is None:
                return None
            return self._with_details(uow, [allotment])[0]

    def find_active_by_student(self, student_id: int) -> Optional[AllotmentDetail]:
        with self._backend.unit_of_work(read_only=True) as uow:
            allotment = uow.get_repo(AllotmentRepository).find_active_by_student(student_id)
            if allotment is None:
                return None
            return self._with_details(uow, [allotment])[0]

    def find_active_by_hostel(self, hostel_id: int) -> List[AllotmentDetail]:
        """Active allotments in a hostel, ordered by room number then student name."""
        with self._backend.unit_of_work(read_only=True) as uow:
            uow.get_repo(HostelRepository).get_by_id(hostel_id)
            room_ids = [room.room_id for room in uow.get_repo(RoomRepository).find_by_hostel(hostel_id)]
            active = uow.get_repo(AllotmentRepository).find_active_for_rooms(room_ids)
            details = self._with_details(uow, active)

        return sorted(details, key=lambda d: (d.room_no or "", d.student_name or ""))

    def find_history_by_student(self, student_id: int) -> List[AllotmentDetail]:
        """Every allotment of a student, newest first."""
        with self._backend.unit_of_work(read_only=True) as uow:
            history = uow.get_repo(AllotmentRepository).find_by_student(student_id)
            return self._with_details(uow, history)

    def find_pending(self) -> List[AllotmentDetail]:
        """Pending applications, oldest first."""
        with self._backend.unit_of_work(read_only=True) as uow:
            pending = uow.get_repo(AllotmentRepository).find_pending()
            return self._with_details(uow, pending)

    def get_occupancy_report(self, hostel_id: Optional[int] = None) -> List[HostelOccupancyReport]:
        """
        Per-hostel occupancy ordered by hostel name.

        Raises:
            HostelNotFoundError: ``hostel_id`` given but unknown
        """
        with self._backend.unit_of_work(read_only=True) as uow:
            hostel_repo = uow.get_repo(HostelRepository)
            room_repo = uow.get_repo(RoomRepository)

            if hostel_id is not None:
                hostels = [hostel_repo.get_by_id(hostel_id)]
                rooms = room_repo.find_by_hostel(hostel_id)
            else:
                hostels = hostel_repo.find_all_ordered()
                rooms = room_repo.find_all()

            active = uow.get_repo(AllotmentRepository).find_active_for_rooms(
                [room.room_id for room in rooms]
            )

        return build_occupancy_report(hostels, rooms, active)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _approve_with_checks(self, uow: UnitOfWork, allotment_id: int) -> Optional[AllotmentRecord]:
        rooms = uow.get_repo(RoomRepository)
        allotments = uow.get_repo(AllotmentRepository)

        pending = allotments.find_pending_by_id(allotment_id)
        if pending is None:
            return None

        room = rooms.get_by_id(pending.room_id, lock=True)

        # A concurrent approval may have committed while we waited for the room
        pending = allotments.find_pending_by_id(allotment_id, lock=True)
        if pending is None:
            return None

        self._ensure_room_accepts_students(room, "approve")

        occupants = allotments.count_active_for_room(room.room_id)
        if occupants >= room.capacity:
            self._reject("approve", "room full", allotment_id=allotment_id, room_id=room.room_id)
            raise RoomFullError(room.room_id, room.capacity, occupants)

        if allotments.count_active_for_student(pending.student_id) > 0:
            self._reject(
                "approve", "student already allocated",
                allotment_id=allotment_id, student_id=pending.student_id,
            )
            raise StudentAlreadyAllocatedError(pending.student_id)

        approved = self._activate(allotments, pending)
        if approved is not None and occupants + 1 >= room.capacity:
            rooms.set_status(room.room_id, RoomStatus.OCCUPIED)
        return approved

    def _activate(
        self,
        allotments: AllotmentRepository,
        pending: AllotmentRecord,
    ) -> Optional[AllotmentRecord]:
        try:
            return allotments.activate(pending.allotment_id)
        except DuplicateEntryError as exc:
            raise StudentAlreadyAllocatedError(pending.student_id) from exc

    def _insert_allotment(
        self,
        allotments: AllotmentRepository,
        student_id: int,
        room_id: int,
        status: AllotmentStatus,
    ) -> AllotmentRecord:
        try:
            return allotments.create_allotment(student_id, room_id, self._today(), status=status)
        except DuplicateEntryError as exc:
            # Lost the race against another allocation for the same student
            self._reject(
                "insert", "unique index rejected active allotment",
                student_id=student_id, room_id=room_id,
            )
            raise StudentAlreadyAllocatedError(student_id) from exc

    def _ensure_room_accepts_students(self, room: RoomRecord, operation: str) -> None:
        if room.is_under_maintenance:
            self._reject(operation, "room under maintenance", room_id=room.room_id)
            raise RoomUnavailableError(room.room_id, room.status.value)

    def _with_details(
        self,
        uow: UnitOfWork,
        allotments: Sequence[AllotmentRecord],
    ) -> List[AllotmentDetail]:
        """Join allotments with their room, hostel and student rows."""
        rooms = uow.get_repo(RoomRepository).map_by_id([a.room_id for a in allotments])
        hostels = uow.get_repo(HostelRepository).map_by_id(
            [room.hostel_id for room in rooms.values()]
        )
        students = uow.get_repo(StudentRepository).map_by_id([a.student_id for a in allotments])

        details = []
        for allotment in allotments:
            extra: Dict[str, Any] = {}
            room = rooms.get(allotment.room_id)
            if room is not None:
                extra.update(room_no=room.room_no, capacity=room.capacity, hostel_id=room.hostel_id)
                hostel = hostels.get(room.hostel_id)
                if hostel is not None:
                    extra.update(
                        hostel_name=hostel.hostel_name,
                        hostel_type=hostel.hostel_type,
                        location=hostel.location,
                    )
            student = students.get(allotment.student_id)
            if student is not None:
                extra.update(
                    student_name=student.name,
                    reg_no=student.reg_no,
                    year_of_study=student.year_of_study,
                    department=student.department,
                )
            details.append(AllotmentDetail(**allotment.model_dump(), **extra))
        return details

    @staticmethod
    def _reject(operation: str, reason: str, **context: Any) -> None:
        logger.warning(f"{operation} rejected: {reason}", extra=context)


__all__ = ["AllotmentManager"]
