"""Student repository. Students are referenced by allotments, never owned."""

from typing import Optional

from hostel_allotment.core.exceptions import StudentNotFoundError
from hostel_allotment.persistence.base import STUDENTS
from hostel_allotment.repositories.base_repository import BaseRepository
from hostel_allotment.schemas.records import StudentRecord


class StudentRepository(BaseRepository[StudentRecord]):
    table = STUDENTS
    not_found_error = StudentNotFoundError

    def find_by_reg_no(self, reg_no: str) -> Optional[StudentRecord]:
        return self.find_one({"reg_no": reg_no})

    def find_by_user_id(self, user_id: int) -> Optional[StudentRecord]:
        return self.find_one({"user_id": user_id})
