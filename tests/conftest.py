from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest

from hostel_allotment.config.settings import get_settings
from hostel_allotment.db.init_db import init_db
from hostel_allotment.db.session import build_engine
from hostel_allotment.models.enums import HostelType
from hostel_allotment.persistence.sql import SqlBackend
from hostel_allotment.schemas.room import HostelCreate, RoomCreate, StudentCreate
from hostel_allotment.services.allotment_service import AllotmentManager
from hostel_allotment.services.room_directory import RoomDirectory

TODAY = date(2026, 3, 2)


@pytest.fixture
def settings():
    return get_settings().model_copy(update={"ALLOTMENT_REVALIDATE_ON_APPROVAL": True})


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'allotments.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def backend(engine):
    return SqlBackend.from_engine(engine)


@pytest.fixture
def manager(backend, settings):
    return AllotmentManager(backend, settings=settings, today=lambda: TODAY)


@pytest.fixture
def directory(backend):
    return RoomDirectory(backend)


@pytest.fixture
def seeded(directory):
    """One boys' hostel with a double, a single and a triple, plus six students."""
    north = directory.create_hostel(
        HostelCreate(hostel_name="North Block", hostel_type=HostelType.BOYS, location="North Campus")
    )
    south = directory.create_hostel(
        HostelCreate(hostel_name="Aravali", hostel_type=HostelType.GIRLS, location="South Campus")
    )
    double = directory.create_room(RoomCreate(hostel_id=north.hostel_id, room_no="101", capacity=2))
    single = directory.create_room(RoomCreate(hostel_id=north.hostel_id, room_no="102", capacity=1))
    triple = directory.create_room(RoomCreate(hostel_id=south.hostel_id, room_no="A-201", capacity=3))
    students = [
        directory.create_student(
            StudentCreate(
                name=f"Student {index}",
                reg_no=f"REG{index:03d}",
                year_of_study=2,
                department="CSE",
            )
        )
        for index in range(1, 7)
    ]
    return SimpleNamespace(
        north=north,
        south=south,
        double=double,
        single=single,
        triple=triple,
        students=[student.student_id for student in students],
    )
