"""
tests/test_progress.py
======================

Unit tests for the phase and percentage aggregation in leasekeeper.progress
"""

from datetime import date

from leasekeeper.models import MilestoneStatus, MilestoneType, OverallStatus
from leasekeeper.progress import (
    current_milestone,
    next_deadline,
    overall_status,
    progress_percentage,
    summarize,
)
from leasekeeper.timeline import default_milestones


def _sequence():
    ms = default_milestones("b1", "u1")
    for i, m in enumerate(ms):
        m.id = f"m{i + 1}"
    return ms


def _complete(ms, on=date(2024, 1, 1)):
    ms.status = MilestoneStatus.COMPLETED
    ms.completed_date = on


def test_percentage():
    assert progress_percentage(0, 5) == 0
    assert progress_percentage(1, 5) == 20
    assert progress_percentage(5, 5) == 100
    assert progress_percentage(0, 0) == 0


def test_phases():
    ms = _sequence()
    assert overall_status(ms) is OverallStatus.NOT_STARTED
    assert overall_status([]) is OverallStatus.NOT_STARTED

    ms[0].status = MilestoneStatus.IN_PROGRESS
    assert overall_status(ms) is OverallStatus.ELIGIBILITY_PHASE

    _complete(ms[0])
    assert overall_status(ms) is OverallStatus.FORMATION_PHASE
    _complete(ms[1])
    assert overall_status(ms) is OverallStatus.NOTICE_PHASE
    _complete(ms[2])
    assert overall_status(ms) is OverallStatus.WAITING_PERIOD
    _complete(ms[3])
    assert overall_status(ms) is OverallStatus.ACQUISITION_PHASE
    _complete(ms[4])
    assert overall_status(ms) is OverallStatus.COMPLETED


def test_current_and_next_deadline():
    ms = _sequence()
    _complete(ms[0])
    assert current_milestone(ms).milestone_type is MilestoneType.COMPANY_FORMATION

    ms[4].calculated_deadline = date(2024, 4, 14)
    ms[3].calculated_deadline = date(2024, 2, 14)
    assert next_deadline(ms) is ms[3]

    _complete(ms[3])
    assert next_deadline(ms) is ms[4]


def test_summarize():
    ms = _sequence()
    _complete(ms[0], date(2024, 1, 2))
    ms[3].calculated_deadline = date(2024, 2, 14)

    s = summarize(ms, today=date(2024, 2, 4))

    assert s["total_milestones"] == 5
    assert s["completed_milestones"] == 1
    assert s["progress_percentage"] == 20
    assert s["overall_status"] is OverallStatus.FORMATION_PHASE
    assert s["current_milestone_id"] == "m2"
    assert s["next_deadline"] == date(2024, 2, 14)
    assert s["days_until_next_deadline"] == 10
    assert s["process_started_date"] == date(2024, 1, 2)
    assert s["process_completed_date"] is None
