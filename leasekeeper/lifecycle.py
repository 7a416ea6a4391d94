"""
leasekeeper.lifecycle
=====================

State-transition guard for a :class:`leasekeeper.models.Milestone`.

A tiny finite-state-machine describes which statuses are legal successors
of each status.  ``COMPLETED`` has no successors, so a finished milestone
can never regress.  The helper :pyfunc:`advance_status` mutates a
milestone **in-place** after validating the transition.
"""

from __future__ import annotations

from .models import Milestone, MilestoneStatus

# ---------------------------------------------------------------------
# Allowed transitions: source status → set[valid target statuses]
# ---------------------------------------------------------------------
RULES = {
    MilestoneStatus.PENDING:     {MilestoneStatus.IN_PROGRESS, MilestoneStatus.COMPLETED, MilestoneStatus.OVERDUE},
    MilestoneStatus.IN_PROGRESS: {MilestoneStatus.COMPLETED, MilestoneStatus.OVERDUE},
    MilestoneStatus.OVERDUE:     {MilestoneStatus.IN_PROGRESS, MilestoneStatus.COMPLETED},
    MilestoneStatus.COMPLETED:   set(),
}


def can_transition(current: MilestoneStatus, new_status: MilestoneStatus) -> bool:
    return new_status in RULES.get(current, set())


def advance_status(milestone: Milestone, new_status: MilestoneStatus) -> None:
    """
    Change :pyattr:`milestone.status` if the transition is legal,
    otherwise raise :class:`ValueError`.

    Examples
    --------
    >>> ms = Milestone("b1", "u1", MilestoneType.COMPANY_FORMATION, "RTM Company Formation", 2)
    >>> advance_status(ms, MilestoneStatus.COMPLETED)
    >>> advance_status(ms, MilestoneStatus.IN_PROGRESS)
    Traceback (most recent call last):
        ...
    ValueError: illegal transition completed → in_progress
    """
    current = milestone.status
    if not can_transition(current, new_status):
        raise ValueError(f"illegal transition {current} → {new_status}")
    milestone.status = new_status
