# hostel_allotment/models/room_allotment.py
"""
Room allotment model.

Rows are never deleted; a Vacated row is the historical record of a stay.
The partial unique index rejects a second Active allotment for a student at
the storage level, so a lost race surfaces as an integrity error instead of
a duplicate occupancy.
"""

from datetime import date
from typing import Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_allotment.models.base import Base, TimestampMixin
from hostel_allotment.models.enums import AllotmentStatus

_ACTIVE_ONLY = text("status = 'Active'")


class RoomAllotment(Base, TimestampMixin):
    """Links one student to one room for a span of time."""

    __tablename__ = "room_allotments"
    __table_args__ = (
        CheckConstraint(
            "status IN ('Pending', 'Active', 'Vacated')",
            name="ck_room_allotments_status",
        ),
        Index(
            "uq_room_allotments_active_student",
            "student_id",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
        Index("ix_room_allotments_room_status", "room_id", "status"),
    )

    allotment_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("students.student_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("rooms.room_id", ondelete="RESTRICT"),
        nullable=False,
    )
    allotment_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AllotmentStatus.ACTIVE.value,
    )
    vacated_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    room: Mapped["Room"] = relationship(back_populates="allotments")  # noqa: F821
