"""
leasekeeper.progress
====================

Read-only projection from a building's milestones to the fields cached on
its :class:`~leasekeeper.models.TimelineProgress` record.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .deadlines import days_until
from .models import Milestone, MilestoneStatus, MilestoneType, OverallStatus

# phase reached once the given milestone (and everything before it) is done
_PHASE_AFTER = {
    MilestoneType.ELIGIBILITY_ASSESSMENT: OverallStatus.FORMATION_PHASE,
    MilestoneType.COMPANY_FORMATION: OverallStatus.NOTICE_PHASE,
    MilestoneType.CLAIM_NOTICE_SERVED: OverallStatus.WAITING_PERIOD,
    MilestoneType.COUNTER_NOTICE_PERIOD: OverallStatus.ACQUISITION_PHASE,
    MilestoneType.ACQUISITION_COMPLETE: OverallStatus.COMPLETED,
}

NEXT_ACTIONS = {
    OverallStatus.NOT_STARTED: "Start eligibility assessment",
    OverallStatus.ELIGIBILITY_PHASE: "Complete eligibility assessment",
    OverallStatus.FORMATION_PHASE: "Form the RTM company and appoint directors",
    OverallStatus.NOTICE_PHASE: "Serve the claim notice on the landlord and qualifying tenants",
    OverallStatus.WAITING_PERIOD: "Wait for the counter-notice period to end",
    OverallStatus.ACQUISITION_PHASE: "Complete the management handover",
    OverallStatus.COMPLETED: "RTM process complete",
    OverallStatus.DISPUTED: "Respond to the counter-notice",
    OverallStatus.ABANDONED: "No action required",
}


def progress_percentage(completed: int, total: int) -> float:
    """``100 * completed / total``; zero when there is nothing to complete."""
    if total <= 0:
        return 0.0
    return completed * 100 / total


def _ordered(milestones: Iterable[Milestone]) -> List[Milestone]:
    return sorted(milestones, key=lambda m: m.milestone_order)


def overall_status(milestones: Iterable[Milestone]) -> OverallStatus:
    """Coarse phase label derived from which milestones are completed."""
    ordered = _ordered(milestones)
    if not ordered:
        return OverallStatus.NOT_STARTED
    if all(m.is_completed for m in ordered):
        return OverallStatus.COMPLETED

    done = [m for m in ordered if m.is_completed]
    if not done:
        started = any(m.status is not MilestoneStatus.PENDING for m in ordered)
        return OverallStatus.ELIGIBILITY_PHASE if started else OverallStatus.NOT_STARTED
    return _PHASE_AFTER[done[-1].milestone_type]


def next_action(status: OverallStatus) -> str:
    return NEXT_ACTIONS[status]


def current_milestone(milestones: Iterable[Milestone]) -> Optional[Milestone]:
    """First milestone in sequence that is not yet completed."""
    return next((m for m in _ordered(milestones) if not m.is_completed), None)


def next_deadline(milestones: Iterable[Milestone]) -> Optional[Milestone]:
    """Open milestone with the earliest calculated deadline."""
    open_dated = [m for m in milestones if not m.is_completed and m.calculated_deadline is not None]
    if not open_dated:
        return None
    return min(open_dated, key=lambda m: (m.calculated_deadline, m.milestone_order))


def summarize(milestones: Iterable[Milestone], today: Optional[date] = None) -> Dict[str, Any]:
    """
    Fields to write back onto the progress record.

    Returns a dict so stores can apply it as a partial update.
    """
    ordered = _ordered(milestones)
    total = len(ordered)
    completed = sum(1 for m in ordered if m.is_completed)
    status = overall_status(ordered)
    current = current_milestone(ordered)
    upcoming = next_deadline(ordered)

    started = [d for m in ordered for d in (m.started_date, m.completed_date) if d is not None]
    finished = [m.completed_date for m in ordered if m.completed_date is not None]

    return {
        "total_milestones": total,
        "completed_milestones": completed,
        "progress_percentage": progress_percentage(completed, total),
        "overall_status": status,
        "current_milestone_id": current.id if current else None,
        "next_action_required": next_action(status),
        "next_deadline": upcoming.calculated_deadline if upcoming else None,
        "days_until_next_deadline": days_until(upcoming.calculated_deadline, today) if upcoming else None,
        "process_started_date": min(started) if started else None,
        "process_completed_date": max(finished) if status is OverallStatus.COMPLETED else None,
    }
