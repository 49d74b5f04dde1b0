# app/api/v1/dashboard/availability.py
"""
Office availability endpoints: configuration and bookable slots
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging

from app.api.dependencies import enforce_route_permission, get_current_active_user
from app.config.database import get_db
from app.models.user import User
from app.schemas.availability import AvailabilityUpdate
from app.services.availability.availability_service import AvailabilityResult, AvailabilityService

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/office/{office_id}/availability",
    tags=["Availability"],
    dependencies=[Depends(enforce_route_permission)]
)


def _unwrap(result: AvailabilityResult) -> dict:
    if not result.success:
        raise HTTPException(status_code=result.status_code, detail=result.message)
    return result.data


@router.get("")
async def get_availability(
        office_id: UUID,
        date: Optional[str] = Query(None, description="YYYY-MM-DD"),
        db: Session = Depends(get_db)
):
    """
    Availability configuration, created with defaults on first read.
    With ?date= also returns free and booked slots for that day.
    """
    if date:
        return _unwrap(AvailabilityService.get_available_slots(db, office_id, date))

    return {"config": _unwrap(AvailabilityService.get_config(db, office_id))}


@router.put("")
async def update_availability(
        office_id: UUID,
        payload: AvailabilityUpdate,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    config = _unwrap(
        AvailabilityService.update_config(db, current_user, office_id, payload.to_partial_config())
    )
    return {"success": True, "message": "Availability updated successfully", "config": config}


@router.get("/slots")
async def get_slots(
        office_id: UUID,
        date: Optional[str] = Query(None, description="YYYY-MM-DD"),
        db: Session = Depends(get_db)
):
    """Start times still free on a date (office must already be configured)"""
    return _unwrap(AvailabilityService.get_slot_starts(db, office_id, date))
