from __future__ import annotations

import threading

import pytest

from hostel_allotment.core.exceptions import (
    PendingApplicationExistsError,
    RoomFullError,
    RoomUnavailableError,
    StudentAlreadyAllocatedError,
    StudentNotFoundError,
)
from hostel_allotment.models.enums import AllotmentStatus, RoomStatus
from hostel_allotment.services.allotment_service import AllotmentManager


def test_apply_creates_pending_row(manager, directory, seeded):
    application = manager.apply(seeded.students[0], seeded.single.room_id)

    assert application.status == AllotmentStatus.PENDING
    assert directory.get_room(seeded.single.room_id).status == RoomStatus.VACANT
    assert [row.allotment_id for row in manager.find_pending()] == [application.allotment_id]


def test_apply_rejects_second_pending_application(manager, seeded):
    manager.apply(seeded.students[0], seeded.single.room_id)

    with pytest.raises(PendingApplicationExistsError):
        manager.apply(seeded.students[0], seeded.double.room_id)


def test_apply_rejects_allocated_student(manager, seeded):
    manager.allocate(seeded.students[0], seeded.double.room_id)

    with pytest.raises(StudentAlreadyAllocatedError):
        manager.apply(seeded.students[0], seeded.single.room_id)


def test_apply_rejects_maintenance_room_and_unknown_student(manager, directory, seeded):
    directory.set_maintenance(seeded.single.room_id, True)
    with pytest.raises(RoomUnavailableError):
        manager.apply(seeded.students[0], seeded.single.room_id)

    with pytest.raises(StudentNotFoundError):
        manager.apply(777, seeded.double.room_id)


def test_approve_activates_and_fills_room(manager, directory, seeded):
    application = manager.apply(seeded.students[0], seeded.single.room_id)

    approved = manager.approve_pending(application.allotment_id)

    assert approved.status == AllotmentStatus.ACTIVE
    assert directory.get_room(seeded.single.room_id).status == RoomStatus.OCCUPIED
    assert manager.find_pending() == []


def test_approve_non_pending_returns_none(manager, seeded):
    allotment = manager.allocate(seeded.students[0], seeded.double.room_id)

    assert manager.approve_pending(allotment.allotment_id) is None
    assert manager.approve_pending(98765) is None


def test_approve_revalidates_capacity(manager, seeded):
    application = manager.apply(seeded.students[0], seeded.single.room_id)
    manager.allocate(seeded.students[1], seeded.single.room_id)

    with pytest.raises(RoomFullError):
        manager.approve_pending(application.allotment_id)

    assert manager.find_with_details(application.allotment_id).status == AllotmentStatus.PENDING


def test_approve_without_revalidation_is_plain_update(backend, settings, directory, seeded):
    lenient = AllotmentManager(
        backend,
        settings=settings.model_copy(update={"ALLOTMENT_REVALIDATE_ON_APPROVAL": False}),
    )
    application = lenient.apply(seeded.students[0], seeded.single.room_id)
    lenient.allocate(seeded.students[1], seeded.single.room_id)

    approved = lenient.approve_pending(application.allotment_id)

    # No capacity check and no status recompute on this path
    assert approved.status == AllotmentStatus.ACTIVE
    assert lenient.recompute_room_status(seeded.single.room_id).status == RoomStatus.OCCUPIED


def test_approve_conflicting_with_active_allotment(backend, settings, seeded):
    lenient = AllotmentManager(
        backend,
        settings=settings.model_copy(update={"ALLOTMENT_REVALIDATE_ON_APPROVAL": False}),
    )
    student = seeded.students[0]
    application = lenient.apply(student, seeded.single.room_id)
    lenient.allocate(student, seeded.double.room_id)

    # The unique index on Active rows still refuses a second Active allotment
    with pytest.raises(StudentAlreadyAllocatedError):
        lenient.approve_pending(application.allotment_id)


def test_concurrent_double_approval(manager, seeded):
    application = manager.apply(seeded.students[0], seeded.triple.room_id)
    barrier = threading.Barrier(2)
    results = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        outcome = manager.approve_pending(application.allotment_id)
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    winners = [result for result in results if result is not None]
    assert len(winners) == 1
    assert winners[0].status == AllotmentStatus.ACTIVE
    assert results.count(None) == 1
