# hostel_allotment/models/hostel.py
"""Hostel building record."""

from typing import List, Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_allotment.models.base import Base, TimestampMixin


class Hostel(Base, TimestampMixin):
    """A hostel building grouping a set of rooms."""

    __tablename__ = "hostels"

    hostel_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hostel_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    hostel_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    total_rooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    warden_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    rooms: Mapped[List["Room"]] = relationship(back_populates="hostel")  # noqa: F821
