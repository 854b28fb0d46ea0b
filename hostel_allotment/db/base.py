"""SQLAlchemy metadata with every model registered."""
from hostel_allotment.models import Base  # noqa: F401
from hostel_allotment.models import Hostel, Room, RoomAllotment, Student  # noqa: F401

__all__ = ["Base"]
