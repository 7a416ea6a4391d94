"""
leasekeeper.deadlines
=====================

Statutory date arithmetic.

Everything here is a pure function: a base date plus an offset in days.
Under the Commonhold and Leasehold Reform Act 2002 the landlord has one
month (modelled as 30 days) from service of the claim notice to serve a
counter-notice, and the RTM company acquires management no earlier than
three months (90 days) after service.

The second half of the module reproduces the "deadline calculator" view:
a fixed list of steps, each an offset from a base date, that can be filled
in from a building's timeline or from a date the user picks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple, TypeVar

from .models import Milestone, MilestoneStatus, TimelineProgress
from .settings import Settings, settings as default_settings

D = TypeVar("D", date, datetime)

COUNTER_NOTICE_DAYS = 30
ACQUISITION_DAYS = 90


def compute_deadline(base_date: Optional[D], offset_days: int) -> Optional[D]:
    """
    Return ``base_date`` moved by ``offset_days`` whole days.

    Works for both :class:`~datetime.date` and :class:`~datetime.datetime`
    (the result has the same type).  A missing base date gives ``None``.

    >>> compute_deadline(date(2024, 1, 15), 30)
    datetime.date(2024, 2, 14)
    """
    if base_date is None:
        return None
    return base_date + timedelta(days=int(offset_days))


def statutory_dates(
    claim_notice_date: date,
    counter_notice_days: int = COUNTER_NOTICE_DAYS,
    acquisition_days: int = ACQUISITION_DAYS,
) -> Tuple[date, date]:
    """Return ``(counter_notice_deadline, acquisition_date)`` for a service date."""
    return (
        compute_deadline(claim_notice_date, counter_notice_days),
        compute_deadline(claim_notice_date, acquisition_days),
    )


def as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def days_until(deadline: date | datetime, today: Optional[date] = None) -> int:
    """Whole days from *today* to *deadline*; negative once it has passed."""
    today = today or date.today()
    return (as_date(deadline) - as_date(today)).days


def is_overdue(days_remaining: int) -> bool:
    return days_remaining < 0


def is_urgent(days_remaining: int, threshold: Optional[int] = None) -> bool:
    """Due today or within *threshold* days (settings default, 7)."""
    if threshold is None:
        threshold = default_settings.urgent_deadline_days
    return 0 <= days_remaining <= threshold


# ---------------------------------------------------------------------
# Deadline calculator view
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class DeadlineStep:
    key: str
    title: str
    description: str
    base_date_label: str
    days_from_base: int
    is_statutory: bool


DEADLINE_STEPS: Tuple[DeadlineStep, ...] = (
    DeadlineStep(
        "company_formation",
        "Company Formation Deadline",
        "RTM company must be formed before serving claim notice",
        "Target claim notice date",
        -14,
        False,
    ),
    DeadlineStep(
        "claim_notice_served",
        "Claim Notice Service",
        "Formal notice to landlord and qualifying tenants",
        "Selected service date",
        0,
        True,
    ),
    DeadlineStep(
        "counter_notice_deadline",
        "Counter-Notice Deadline",
        "Landlord has 1 month to dispute the claim",
        "Claim notice service date",
        COUNTER_NOTICE_DAYS,
        True,
    ),
    DeadlineStep(
        "acquisition_date",
        "Acquisition Date",
        "RTM company takes control of management (minimum 3 months after claim notice)",
        "Claim notice service date",
        ACQUISITION_DAYS,
        True,
    ),
)

# steps recalculated whenever the claim notice date changes
_CLAIM_NOTICE_DEPENDANTS = ("counter_notice_deadline", "acquisition_date")


@dataclass
class DeadlineCalculation:
    step: DeadlineStep
    base_date: Optional[date] = None
    calculated_date: Optional[date] = None
    status: str = "pending"  # pending | calculated | completed
    is_urgent: bool = False
    is_overdue: bool = False


def _step(key: str) -> DeadlineStep:
    for step in DEADLINE_STEPS:
        if step.key == key:
            return step
    raise KeyError(key)


def calculate_from_date(step_key: str, base_date: date) -> Dict[str, date]:
    """
    Calculate the date for *step_key* from a user-selected *base_date*.

    Selecting the claim notice date also fills in its dependants, so the
    returned mapping can hold up to three entries.
    """
    step = _step(step_key)
    dates = {step.key: compute_deadline(base_date, step.days_from_base)}
    if step.key == "claim_notice_served":
        for key in _CLAIM_NOTICE_DEPENDANTS:
            dates[key] = compute_deadline(base_date, _step(key).days_from_base)
    return dates


def deadline_schedule(
    progress: TimelineProgress,
    milestones: Iterable[Milestone],
    today: Optional[date] = None,
    settings: Optional[Settings] = None,
) -> List[DeadlineCalculation]:
    """Build the calculator rows for a building's current timeline state."""
    cfg = settings or default_settings
    rows = {s.key: DeadlineCalculation(step=s) for s in DEADLINE_STEPS}

    for ms in milestones:
        row = rows.get(str(ms.milestone_type))
        if row is not None and ms.status is MilestoneStatus.COMPLETED:
            row.status = "completed"
            row.base_date = ms.completed_date
            row.calculated_date = ms.completed_date

    served = progress.claim_notice_served_date
    if served is not None:
        counter, acquisition = statutory_dates(served, cfg.counter_notice_days, cfg.acquisition_days)
        for key, when in (("counter_notice_deadline", counter), ("acquisition_date", acquisition)):
            row = rows[key]
            row.base_date = served
            row.calculated_date = when
            row.status = "calculated"
        remaining = days_until(counter, today)
        counter_row = rows["counter_notice_deadline"]
        counter_row.is_urgent = 0 < remaining <= cfg.urgent_deadline_days
        counter_row.is_overdue = is_overdue(remaining)

    return [rows[s.key] for s in DEADLINE_STEPS]

