# hostel_allotment/models/student.py
"""Student identity referenced by allotments."""

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hostel_allotment.models.base import Base, TimestampMixin


class Student(Base, TimestampMixin):
    __tablename__ = "students"

    student_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    reg_no: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    year_of_study: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
