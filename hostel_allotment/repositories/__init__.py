"""
Repositories over the persistence contract.

Each repository is bound to one unit of work; obtain them with
``uow.get_repo(RepositoryClass)``.
"""

from hostel_allotment.repositories.allotment_repository import AllotmentRepository
from hostel_allotment.repositories.base_repository import BaseRepository
from hostel_allotment.repositories.hostel_repository import HostelRepository
from hostel_allotment.repositories.room_repository import RoomRepository
from hostel_allotment.repositories.student_repository import StudentRepository

__all__ = [
    "AllotmentRepository",
    "BaseRepository",
    "HostelRepository",
    "RoomRepository",
    "StudentRepository",
]
