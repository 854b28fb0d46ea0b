# hostel_allotment/models/room.py
"""
Room model.

``status`` is derived from the number of Active allotments except when an
administrator marks the room Under Maintenance, which takes precedence.
"""

from typing import List

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_allotment.models.base import Base, TimestampMixin
from hostel_allotment.models.enums import RoomStatus


class Room(Base, TimestampMixin):
    """A physical room within a hostel."""

    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("hostel_id", "room_no", name="uq_rooms_hostel_room_no"),
        CheckConstraint("capacity > 0", name="ck_rooms_capacity_positive"),
        CheckConstraint(
            "status IN ('Vacant', 'Occupied', 'Under Maintenance')",
            name="ck_rooms_status",
        ),
    )

    room_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hostel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("hostels.hostel_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    room_no: Mapped[str] = mapped_column(String(20), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=RoomStatus.VACANT.value,
        index=True,
    )

    hostel: Mapped["Hostel"] = relationship(back_populates="rooms")  # noqa: F821
    allotments: Mapped[List["RoomAllotment"]] = relationship(back_populates="room")  # noqa: F821
