"""
Allotment endpoints: allocation, applications, approval, vacating and the
student / hostel allotment lookups.
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, status

from hostel_allotment.core.exceptions import AllotmentNotFoundError
from hostel_allotment.dependencies import get_allotment_manager
from hostel_allotment.models.enums import AllotmentStatus
from hostel_allotment.schemas.allotment import (
    AllocateRequest,
    AllotmentDetail,
    ApplyRequest,
    VacateRequest,
)
from hostel_allotment.schemas.records import AllotmentRecord
from hostel_allotment.services.allotment_service import AllotmentManager

router = APIRouter(tags=["Allotments"])


@router.post(
    "/allotments",
    response_model=AllotmentRecord,
    status_code=status.HTTP_201_CREATED,
)
def allocate_room(
    payload: AllocateRequest,
    manager: AllotmentManager = Depends(get_allotment_manager),
) -> AllotmentRecord:
    """Allocate a room directly; the allotment is Active immediately."""
    return manager.allocate(payload.student_id, payload.room_id)


@router.post(
    "/allotments/applications",
    response_model=AllotmentRecord,
    status_code=status.HTTP_201_CREATED,
)
def apply_for_room(
    payload: ApplyRequest,
    manager: AllotmentManager = Depends(get_allotment_manager),
) -> AllotmentRecord:
    return manager.apply(payload.student_id, payload.room_id)


@router.get("/allotments/pending", response_model=List[AllotmentDetail])
def list_pending(manager: AllotmentManager = Depends(get_allotment_manager)):
    return manager.find_pending()


@router.get("/allotments/{allotment_id}", response_model=AllotmentDetail)
def get_allotment(
    allotment_id: int,
    manager: AllotmentManager = Depends(get_allotment_manager),
):
    detail = manager.find_with_details(allotment_id)
    if detail is None:
        raise AllotmentNotFoundError(allotment_id)
    return detail


@router.post("/allotments/{allotment_id}/approve", response_model=AllotmentRecord)
def approve_allotment(
    allotment_id: int,
    manager: AllotmentManager = Depends(get_allotment_manager),
) -> AllotmentRecord:
    """Approve a Pending application. A lost concurrent approval answers 404."""
    approved = manager.approve_pending(allotment_id)
    if approved is None:
        raise AllotmentNotFoundError(allotment_id, state=AllotmentStatus.PENDING.value)
    return approved


@router.post("/allotments/{allotment_id}/vacate", response_model=AllotmentRecord)
def vacate_allotment(
    allotment_id: int,
    payload: Optional[VacateRequest] = Body(default=None),
    manager: AllotmentManager = Depends(get_allotment_manager),
) -> AllotmentRecord:
    vacated_date = payload.vacated_date if payload else None
    return manager.vacate(allotment_id, vacated_date)


@router.get("/students/{student_id}/allotment", response_model=AllotmentDetail)
def get_active_allotment(
    student_id: int,
    manager: AllotmentManager = Depends(get_allotment_manager),
):
    detail = manager.find_active_by_student(student_id)
    if detail is None:
        raise AllotmentNotFoundError(state=AllotmentStatus.ACTIVE.value)
    return detail


@router.get("/students/{student_id}/allotments", response_model=List[AllotmentDetail])
def get_allotment_history(
    student_id: int,
    manager: AllotmentManager = Depends(get_allotment_manager),
):
    return manager.find_history_by_student(student_id)


@router.get("/hostels/{hostel_id}/allotments", response_model=List[AllotmentDetail])
def get_hostel_allotments(
    hostel_id: int,
    manager: AllotmentManager = Depends(get_allotment_manager),
):
    return manager.find_active_by_hostel(hostel_id)
