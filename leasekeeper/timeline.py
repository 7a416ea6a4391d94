"""
leasekeeper.timeline
====================

RTM timeline service: the milestone sequence of a building, statutory
deadline fan-out, and the cached progress record.

A :class:`TimelineService` is constructed by the caller around a
repository (:class:`~leasekeeper.store.InMemoryRepository` or
:class:`~leasekeeper.store_db.DBRepository`).  Every public method returns
an :class:`~leasekeeper.models.OperationResult`; store failures are logged
and reported, never raised.

Quick start
-----------
>>> from datetime import date
>>> from leasekeeper.store import InMemoryRepository
>>> svc = TimelineService(InMemoryRepository())
>>> svc.initialize("building-1", "user-1").success
True
>>> claim = svc.get_milestones("building-1").data[2]
>>> svc.complete_milestone(claim.id, date(2024, 1, 15)).success
True
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, List, Optional

from . import events as ev
from .deadlines import as_date, compute_deadline, days_until, deadline_schedule, is_overdue, is_urgent
from .dependencies import DependencyGraph, statutory_graph
from .errors import StoreError
from .events import EventBus, Listener
from .lifecycle import advance_status, can_transition
from .models import (
    FailureKind,
    Milestone,
    MilestoneStatus,
    MilestoneType,
    NextDeadline,
    OperationResult,
    OverallStatus,
    TimelineOverview,
    TimelineProgress,
    UpcomingDeadline,
)
from .progress import next_action, summarize
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# The fixed five-step sequence created for every building
# ---------------------------------------------------------------------
DEFAULT_MILESTONES = (
    dict(
        milestone_type=MilestoneType.ELIGIBILITY_ASSESSMENT,
        title="Eligibility Assessment",
        description="Verify building qualifies for RTM and assess leaseholder interest",
        evidence_required=True,
        evidence_description="Building lease documents, current management agreement, service charge accounts",
        statutory_deadline_days=28,
    ),
    dict(
        milestone_type=MilestoneType.COMPANY_FORMATION,
        title="RTM Company Formation",
        description="Establish the RTM company and appoint directors",
        evidence_required=True,
        evidence_description="Companies House incorporation certificate, articles of association, director appointments",
        statutory_deadline_days=14,
    ),
    dict(
        milestone_type=MilestoneType.CLAIM_NOTICE_SERVED,
        title="Claim Notice Service",
        description="Serve formal RTM claim notice to landlord and qualifying tenants",
        evidence_required=True,
        evidence_description="Proof of service certificates, claim notice copies, recipient lists",
        statutory_deadline_days=7,
    ),
    dict(
        milestone_type=MilestoneType.COUNTER_NOTICE_PERIOD,
        title="Counter-Notice Period",
        description="Wait for counter-notice period (1 month) and respond to any counter-notices",
        evidence_required=False,
        evidence_description="Any counter-notices received, responses to counter-notices",
        statutory_deadline_days=30,
    ),
    dict(
        milestone_type=MilestoneType.ACQUISITION_COMPLETE,
        title="Management Acquisition",
        description="Complete the transfer of management responsibilities",
        evidence_required=True,
        evidence_description="Management handover documents, service charge account transfers, insurance transfers",
        statutory_deadline_days=90,
    ),
)


def default_milestones(building_id: str, user_id: str) -> List[Milestone]:
    return [
        Milestone(building_id=building_id, created_by=user_id, milestone_order=order, is_critical=True, **spec)
        for order, spec in enumerate(DEFAULT_MILESTONES, start=1)
    ]


class TimelineService:
    """Milestone CRUD, deadline fan-out and progress aggregation for one repository."""

    def __init__(
        self,
        repository,
        settings: Optional[Settings] = None,
        events: Optional[EventBus] = None,
        graph: Optional[DependencyGraph] = None,
    ) -> None:
        self.repo = repository
        self.settings = settings or default_settings
        self.events = events or EventBus()
        self.graph = graph or statutory_graph(self.settings.counter_notice_days, self.settings.acquisition_days)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> None:
        self.events.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self.events.unsubscribe(listener)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def initialize(self, building_id: str, user_id: str) -> OperationResult:
        """
        Create the five default milestones and a zeroed progress record.

        Calling it again for the same building is a successful no-op
        (``data == {"created": False}``).
        """
        try:
            if self.repo.progress.get(building_id) is not None:
                return OperationResult.ok({"created": False})

            milestones = default_milestones(building_id, user_id)
            with self.repo.atomic():
                self.repo.milestones.add_many(milestones)
                self.repo.progress.add(
                    TimelineProgress(
                        building_id=building_id,
                        created_by=user_id,
                        overall_status=OverallStatus.NOT_STARTED,
                        total_milestones=len(milestones),
                        completed_milestones=0,
                        progress_percentage=0.0,
                        next_action_required=next_action(OverallStatus.NOT_STARTED),
                    )
                )
        except StoreError as exc:
            logger.error(f"Error initializing RTM timeline for {building_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))

        logger.info(f"Initialized RTM timeline for building {building_id}")
        self.events.publish(ev.INITIALIZED, building_id)
        return OperationResult.ok({"created": True})

    def complete_milestone(
        self,
        milestone_id: str,
        completion_date: date | datetime,
        notes: Optional[str] = None,
        today: Optional[date] = None,
    ) -> OperationResult:
        """
        Mark a milestone completed and update everything derived from it.

        Completing the claim notice fans its date out to the counter-notice
        and acquisition milestones and to the progress record in one atomic
        write.  If the milestone write succeeds but a later write fails the
        result kind is ``PARTIAL``.
        """
        try:
            milestone = self.repo.milestones.get(milestone_id)
        except StoreError as exc:
            logger.error(f"Error loading milestone {milestone_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))

        if milestone is None:
            return OperationResult.fail(FailureKind.NOT_FOUND, f"milestone {milestone_id} not found")
        if milestone.is_completed:
            logger.warning(f"Milestone {milestone_id} is already completed")
            return OperationResult.fail(FailureKind.VALIDATION, f"milestone {milestone_id} is already completed")

        done_on = as_date(completion_date)
        advance_status(milestone, MilestoneStatus.COMPLETED)
        try:
            milestone = self.repo.milestones.update(
                milestone_id,
                status=MilestoneStatus.COMPLETED,
                completed_date=done_on,
                started_date=milestone.started_date or done_on,
                completion_notes=notes,
            )
        except (StoreError, KeyError) as exc:
            logger.error(f"Error completing milestone {milestone_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))

        problems = []
        try:
            self._update_dependents(milestone)
        except (StoreError, KeyError) as exc:
            logger.error(f"Error updating dependent milestones of {milestone_id}: {exc}")
            problems.append(f"dependent deadlines not updated: {exc}")
        try:
            self._recompute(milestone.building_id, today)
        except (StoreError, KeyError) as exc:
            logger.error(f"Error updating timeline progress for {milestone.building_id}: {exc}")
            problems.append(f"progress not updated: {exc}")

        self.events.publish(ev.MILESTONE_COMPLETED, milestone.building_id)
        if problems:
            return OperationResult.fail(FailureKind.PARTIAL, "; ".join(problems), data=milestone)

        logger.info(f"Completed milestone {milestone.milestone_type} for building {milestone.building_id}")
        return OperationResult.ok(milestone)

    def refresh(self, building_id: str, today: Optional[date] = None) -> OperationResult:
        """
        Mark open milestones whose deadline has passed as overdue and
        recompute progress.  ``data`` lists the ids that became overdue.
        """
        today = today or date.today()
        try:
            if self.repo.progress.get(building_id) is None:
                return OperationResult.fail(FailureKind.NOT_FOUND, f"no timeline for building {building_id}")
            newly_overdue = []
            with self.repo.atomic():
                for ms in self.repo.milestones.for_building(building_id):
                    if (
                        ms.calculated_deadline is not None
                        and is_overdue(days_until(ms.calculated_deadline, today))
                        and ms.status is not MilestoneStatus.OVERDUE
                        and can_transition(ms.status, MilestoneStatus.OVERDUE)
                    ):
                        self.repo.milestones.update(ms.id, status=MilestoneStatus.OVERDUE)
                        newly_overdue.append(ms.id)
                self._recompute(building_id, today)
        except (StoreError, KeyError) as exc:
            logger.error(f"Error refreshing timeline for {building_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))

        if newly_overdue:
            logger.warning(f"{len(newly_overdue)} milestone(s) overdue for building {building_id}")
        self.events.publish(ev.REFRESHED, building_id)
        return OperationResult.ok(newly_overdue)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _update_dependents(self, completed: Milestone) -> None:
        """Recalculate deadlines of milestones dated from *completed*."""
        dated = dict(self.graph.dated_dependents(completed.milestone_type))
        if not dated:
            return

        served_on = completed.completed_date
        siblings: Dict[MilestoneType, Milestone] = {
            m.milestone_type: m for m in self.repo.milestones.for_building(completed.building_id)
        }
        with self.repo.atomic():
            for child_type, offset in dated.items():
                child = siblings.get(child_type)
                if child is None:
                    continue
                fields = {"calculated_deadline": compute_deadline(served_on, offset)}
                # the period that starts on the parent's completion is now running
                if child.milestone_order == completed.milestone_order + 1 and can_transition(
                    child.status, MilestoneStatus.IN_PROGRESS
                ):
                    fields["status"] = MilestoneStatus.IN_PROGRESS
                    fields["started_date"] = child.started_date or served_on
                self.repo.milestones.update(child.id, **fields)

            if completed.milestone_type is MilestoneType.CLAIM_NOTICE_SERVED:
                self.repo.progress.update(
                    completed.building_id,
                    claim_notice_served_date=served_on,
                    counter_notice_deadline=compute_deadline(served_on, dated[MilestoneType.COUNTER_NOTICE_PERIOD]),
                    acquisition_date=compute_deadline(served_on, dated[MilestoneType.ACQUISITION_COMPLETE]),
                    overall_status=OverallStatus.WAITING_PERIOD,
                )

    def _recompute(self, building_id: str, today: Optional[date] = None) -> TimelineProgress:
        milestones = self.repo.milestones.for_building(building_id)
        return self.repo.progress.update(building_id, **summarize(milestones, today))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_milestones(self, building_id: str) -> OperationResult:
        """Milestones of a building in sequence order."""
        try:
            return OperationResult.ok(self.repo.milestones.for_building(building_id))
        except StoreError as exc:
            logger.error(f"Error getting milestones for {building_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))

    def get_overview(self, building_id: str, today: Optional[date] = None) -> OperationResult:
        """Progress, milestones, current step, next deadline and recent evidence."""
        try:
            progress = self.repo.progress.get(building_id)
            if progress is None:
                return OperationResult.fail(FailureKind.NOT_FOUND, f"no timeline for building {building_id}")
            milestones = self.repo.milestones.for_building(building_id)
            recent = self.repo.evidence.find(building_id=building_id, limit=self.settings.recent_evidence_limit)
        except StoreError as exc:
            logger.error(f"Error getting timeline overview for {building_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))

        upcoming = None
        if progress.next_deadline is not None:
            remaining = days_until(progress.next_deadline, today)
            upcoming = NextDeadline(
                date=progress.next_deadline,
                description=progress.next_action_required or "Action required",
                days_remaining=remaining,
                is_urgent=remaining <= self.settings.urgent_deadline_days,
            )

        current = next((m for m in milestones if m.id == progress.current_milestone_id), None)
        return OperationResult.ok(
            TimelineOverview(
                progress=progress,
                milestones=milestones,
                current_milestone=current,
                next_deadline=upcoming,
                recent_evidence=recent,
            )
        )

    def get_upcoming_deadlines(
        self,
        building_id: str,
        days_ahead: Optional[int] = None,
        today: Optional[date] = None,
    ) -> OperationResult:
        """Open milestones with a deadline no more than *days_ahead* days away (overdue included)."""
        if days_ahead is None:
            days_ahead = self.settings.upcoming_window_days
        try:
            milestones = self.repo.milestones.for_building(building_id)
        except StoreError as exc:
            logger.error(f"Error getting upcoming deadlines for {building_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))

        dated = sorted(
            (m for m in milestones if not m.is_completed and m.calculated_deadline is not None),
            key=lambda m: m.calculated_deadline,
        )
        items = []
        for ms in dated:
            remaining = days_until(ms.calculated_deadline, today)
            if remaining > days_ahead:
                continue
            items.append(
                UpcomingDeadline(
                    milestone=ms,
                    days_remaining=remaining,
                    is_overdue=is_overdue(remaining),
                    is_urgent=is_urgent(remaining, self.settings.urgent_deadline_days),
                )
            )
        return OperationResult.ok(items)

    def get_deadline_schedule(self, building_id: str, today: Optional[date] = None) -> OperationResult:
        """Rows for the deadline-calculator view of a building."""
        try:
            progress = self.repo.progress.get(building_id)
            if progress is None:
                return OperationResult.fail(FailureKind.NOT_FOUND, f"no timeline for building {building_id}")
            milestones = self.repo.milestones.for_building(building_id)
        except StoreError as exc:
            logger.error(f"Error loading deadline calculations for {building_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))
        return OperationResult.ok(deadline_schedule(progress, milestones, today, self.settings))
