"""
Room allotment repository.

Named queries for the Pending / Active / Vacated lifecycle. The status
transitions are guarded updates: a row that has already left the expected
state is not touched and the caller gets None back.
"""

from datetime import date
from typing import Any, List, Optional, Sequence

from hostel_allotment.core.exceptions import AllotmentNotFoundError
from hostel_allotment.models.enums import AllotmentStatus
from hostel_allotment.persistence.base import ALLOTMENTS
from hostel_allotment.repositories.base_repository import BaseRepository
from hostel_allotment.schemas.records import AllotmentRecord


class AllotmentRepository(BaseRepository[AllotmentRecord]):
    table = ALLOTMENTS
    not_found_error = AllotmentNotFoundError

    # ==================== Queries ====================

    def count_active_for_room(self, room_id: Any) -> int:
        return self.count({"room_id": room_id, "status": AllotmentStatus.ACTIVE})

    def count_active_for_student(self, student_id: Any) -> int:
        return self.count({"student_id": student_id, "status": AllotmentStatus.ACTIVE})

    def find_active(self, allotment_id: Any, *, lock: bool = False) -> Optional[AllotmentRecord]:
        rows = self.find_by_criteria(
            {"allotment_id": allotment_id, "status": AllotmentStatus.ACTIVE},
            lock=lock,
        )
        return rows[0] if rows else None

    def find_pending_by_id(self, allotment_id: Any, *, lock: bool = False) -> Optional[AllotmentRecord]:
        rows = self.find_by_criteria(
            {"allotment_id": allotment_id, "status": AllotmentStatus.PENDING},
            lock=lock,
        )
        return rows[0] if rows else None

    def find_active_by_student(self, student_id: Any) -> Optional[AllotmentRecord]:
        return self.find_one({"student_id": student_id, "status": AllotmentStatus.ACTIVE})

    def find_pending_by_student(self, student_id: Any) -> Optional[AllotmentRecord]:
        return self.find_one({"student_id": student_id, "status": AllotmentStatus.PENDING})

    def find_by_student(self, student_id: Any) -> List[AllotmentRecord]:
        """Full history for a student, newest allotment first."""
        return self.find_by_criteria(
            {"student_id": student_id},
            order_by=("-allotment_date", "-allotment_id"),
        )

    def find_pending(self) -> List[AllotmentRecord]:
        """Pending applications, oldest first."""
        return self.find_by_criteria(
            {"status": AllotmentStatus.PENDING},
            order_by=("allotment_date", "allotment_id"),
        )

    def find_active_for_rooms(self, room_ids: Sequence[Any]) -> List[AllotmentRecord]:
        if not room_ids:
            return []
        return self.find_by_criteria(
            {"room_id": list(room_ids), "status": AllotmentStatus.ACTIVE},
            order_by=("allotment_date", "allotment_id"),
        )

    # ==================== Transitions ====================

    def create_allotment(
        self,
        student_id: Any,
        room_id: Any,
        allotment_date: date,
        status: AllotmentStatus = AllotmentStatus.ACTIVE,
    ) -> AllotmentRecord:
        return self.create({
            "student_id": student_id,
            "room_id": room_id,
            "allotment_date": allotment_date,
            "status": status,
        })

    def mark_vacated(self, allotment_id: Any, vacated_date: date) -> Optional[AllotmentRecord]:
        """Active -> Vacated; None if the row is no longer Active."""
        return self.update(
            allotment_id,
            {"status": AllotmentStatus.VACATED, "vacated_date": vacated_date},
            guard={"status": AllotmentStatus.ACTIVE},
        )

    def activate(self, allotment_id: Any) -> Optional[AllotmentRecord]:
        """Pending -> Active; None if the row is no longer Pending."""
        return self.update(
            allotment_id,
            {"status": AllotmentStatus.ACTIVE},
            guard={"status": AllotmentStatus.PENDING},
        )
