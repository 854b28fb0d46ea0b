"""Occupancy reports."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from hostel_allotment.dependencies import get_allotment_manager
from hostel_allotment.schemas.report import HostelOccupancyReport
from hostel_allotment.services.allotment_service import AllotmentManager

router = APIRouter(tags=["Reports"])


@router.get("/reports/occupancy", response_model=List[HostelOccupancyReport])
def occupancy_report(manager: AllotmentManager = Depends(get_allotment_manager)):
    return manager.get_occupancy_report()


@router.get("/hostels/{hostel_id}/occupancy", response_model=HostelOccupancyReport)
def hostel_occupancy(
    hostel_id: int,
    manager: AllotmentManager = Depends(get_allotment_manager),
):
    return manager.get_occupancy_report(hostel_id)[0]
