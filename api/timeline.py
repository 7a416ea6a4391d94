"""
api.timeline
============

Endpoints for a building's RTM timeline: initialise, inspect, complete
milestones, refresh overdue state and query deadlines.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel

from leasekeeper.deadlines import DEADLINE_STEPS, calculate_from_date
from leasekeeper.timeline import TimelineService

from .deps import get_timeline_service
from .responses import unwrap

router = APIRouter(tags=["timeline"])


class InitRequest(BaseModel):
    """Model for timeline initialisation."""
    user_id: str


class CompleteRequest(BaseModel):
    completion_date: date
    notes: Optional[str] = None


class RefreshRequest(BaseModel):
    today: Optional[date] = None


# ---------- POST /buildings/{building_id}/timeline ----------
@router.post("/buildings/{building_id}/timeline", status_code=201)
async def initialize_timeline(
    building_id: str,
    data: InitRequest,
    response: Response,
    svc: TimelineService = Depends(get_timeline_service),
):
    """
    Create the default milestone sequence for a building.

    Returns 201 when the timeline is created and 200 when it already
    existed (nothing is changed in that case).
    """
    result = unwrap(svc.initialize(building_id, data.user_id))
    if not result["created"]:
        response.status_code = 200
    return result


# ---------- GET /buildings/{building_id}/timeline ----------
@router.get("/buildings/{building_id}/timeline")
async def timeline_overview(
    building_id: str,
    today: Optional[date] = Query(None, description="Evaluate deadlines as of this date"),
    svc: TimelineService = Depends(get_timeline_service),
):
    return unwrap(svc.get_overview(building_id, today=today))


@router.get("/buildings/{building_id}/milestones")
async def list_milestones(building_id: str, svc: TimelineService = Depends(get_timeline_service)):
    return unwrap(svc.get_milestones(building_id))


@router.get("/buildings/{building_id}/deadlines")
async def upcoming_deadlines(
    building_id: str,
    days_ahead: Optional[int] = Query(None, ge=0, description="Look-ahead window in days"),
    today: Optional[date] = Query(None),
    svc: TimelineService = Depends(get_timeline_service),
):
    """Open milestones due within the window, overdue ones included."""
    return unwrap(svc.get_upcoming_deadlines(building_id, days_ahead=days_ahead, today=today))


@router.get("/buildings/{building_id}/deadlines/schedule")
async def deadline_schedule(
    building_id: str,
    today: Optional[date] = Query(None),
    svc: TimelineService = Depends(get_timeline_service),
):
    """Deadline-calculator rows filled in from the building's timeline."""
    return unwrap(svc.get_deadline_schedule(building_id, today=today))


@router.post("/buildings/{building_id}/timeline/refresh")
async def refresh_timeline(
    building_id: str,
    data: Optional[RefreshRequest] = None,
    svc: TimelineService = Depends(get_timeline_service),
):
    today = data.today if data else None
    return {"overdue": unwrap(svc.refresh(building_id, today=today))}


# ---------- POST /milestones/{milestone_id}/complete ----------
@router.post("/milestones/{milestone_id}/complete")
async def complete_milestone(
    milestone_id: str,
    data: CompleteRequest,
    svc: TimelineService = Depends(get_timeline_service),
):
    """
    Mark a milestone completed.

    Replies 207 when the milestone itself was saved but dependent
    deadlines or the progress record could not be updated.
    """
    return unwrap(svc.complete_milestone(milestone_id, data.completion_date, notes=data.notes))


# ---------- GET /deadlines/calculate ----------
@router.get("/deadlines/calculate")
async def calculate_deadline(
    step: str = Query(..., description="Deadline step key, e.g. claim_notice_served"),
    base_date: date = Query(..., description="Date the step is calculated from"),
):
    """Stand-alone calculator: no building needed."""
    try:
        return calculate_from_date(step, base_date)
    except KeyError:
        valid = ", ".join(s.key for s in DEADLINE_STEPS)
        raise HTTPException(status_code=422, detail=f"unknown step {step!r}; expected one of: {valid}")
