"""Hostel repository."""

from typing import List, Optional

from hostel_allotment.core.exceptions import HostelNotFoundError
from hostel_allotment.models.enums import HostelType
from hostel_allotment.persistence.base import HOSTELS
from hostel_allotment.repositories.base_repository import BaseRepository
from hostel_allotment.schemas.records import HostelRecord


class HostelRepository(BaseRepository[HostelRecord]):
    table = HOSTELS
    not_found_error = HostelNotFoundError

    def find_by_name(self, hostel_name: str) -> Optional[HostelRecord]:
        return self.find_one({"hostel_name": hostel_name})

    def find_by_type(self, hostel_type: HostelType) -> List[HostelRecord]:
        return self.find_by_criteria({"hostel_type": hostel_type}, order_by=("hostel_name",))

    def find_all_ordered(self) -> List[HostelRecord]:
        return self.find_all(order_by=("hostel_name",))
