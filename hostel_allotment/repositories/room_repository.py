"""
Room repository.

Room status is only ever written through ``set_status``; the allotment
manager and the room directory decide which label applies.
"""

from typing import Any, List, Optional

from hostel_allotment.core.exceptions import RoomNotFoundError
from hostel_allotment.core.logging import get_logger
from hostel_allotment.models.enums import RoomStatus
from hostel_allotment.persistence.base import ROOMS
from hostel_allotment.repositories.base_repository import BaseRepository
from hostel_allotment.schemas.records import RoomRecord

logger = get_logger(__name__)


class RoomRepository(BaseRepository[RoomRecord]):
    table = ROOMS
    not_found_error = RoomNotFoundError

    def find_by_hostel(self, hostel_id: Any) -> List[RoomRecord]:
        return self.find_by_criteria({"hostel_id": hostel_id}, order_by=("room_no",))

    def find_by_status(self, status: RoomStatus) -> List[RoomRecord]:
        return self.find_by_criteria({"status": status}, order_by=("hostel_id", "room_no"))

    def set_status(self, room_id: Any, status: RoomStatus) -> RoomRecord:
        """
        Write a new status label.

        Raises:
            RoomNotFoundError: If the room does not exist
        """
        room = self.update(room_id, {"status": status})
        if room is None:
            raise RoomNotFoundError(room_id)
        logger.info(
            "Room status changed",
            extra={"room_id": room_id, "room_status": status.value},
        )
        return room

    def set_status_if(
        self,
        room_id: Any,
        status: RoomStatus,
        expected: RoomStatus,
    ) -> Optional[RoomRecord]:
        """Change the label only while the room still carries ``expected``."""
        room = self.update(room_id, {"status": status}, guard={"status": expected})
        if room is not None:
            logger.info(
                "Room status changed",
                extra={"room_id": room_id, "room_status": status.value},
            )
        return room
