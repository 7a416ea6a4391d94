"""
leasekeeper.store
=================

In-memory record stores for milestones, evidence and timeline progress.

This module is intentionally simple (only the standard library) so that
the services can be unit-tested without a database.  The SQLite-backed
stores in :pymod:`leasekeeper.store_db` expose the same methods, so
either :class:`InMemoryRepository` or :class:`~leasekeeper.store_db.DBRepository`
can be handed to the services.

Records are copied on the way in and on the way out; callers never hold
a reference to the stored object.
"""

from __future__ import annotations

import copy
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional

from .models import Evidence, Milestone, TimelineProgress


def _now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class _Tables:
    """The dicts shared by the three stores of one repository."""

    def __init__(self) -> None:
        self.milestones: Dict[str, Milestone] = {}
        self.evidence: Dict[str, Evidence] = {}
        self.progress: Dict[str, TimelineProgress] = {}  # keyed by building_id

    def snapshot(self) -> Dict[str, dict]:
        return copy.deepcopy(vars(self))

    def restore(self, snap: Dict[str, dict]) -> None:
        vars(self).update(snap)


class MilestoneStore:
    """Dictionary-backed milestone table."""

    def __init__(self, tables: _Tables) -> None:
        self._t = tables

    def add_many(self, milestones: List[Milestone]) -> List[Milestone]:
        """Insert new milestones, assigning ids and timestamps."""
        now = _now()
        stored = [replace(m, id=m.id or new_id(), created_at=now, updated_at=now) for m in milestones]
        for m in stored:
            self._t.milestones[m.id] = m
        return [replace(m) for m in stored]

    def get(self, milestone_id: str) -> Optional[Milestone]:
        m = self._t.milestones.get(milestone_id)
        return replace(m) if m else None

    def for_building(self, building_id: str) -> List[Milestone]:
        """All milestones of a building, in ``milestone_order``."""
        rows = [m for m in self._t.milestones.values() if m.building_id == building_id]
        return [replace(m) for m in sorted(rows, key=lambda m: m.milestone_order)]

    def update(self, milestone_id: str, **fields) -> Milestone:
        """Apply a partial update (raise KeyError if not present)."""
        current = self._t.milestones[milestone_id]
        updated = replace(current, updated_at=_now(), **fields)
        self._t.milestones[milestone_id] = updated
        return replace(updated)


class EvidenceStore:
    """Dictionary-backed evidence table."""

    def __init__(self, tables: _Tables) -> None:
        self._t = tables

    def add(self, evidence: Evidence) -> Evidence:
        now = _now()
        stored = replace(evidence, id=evidence.id or new_id(), created_at=now, updated_at=now)
        self._t.evidence[stored.id] = stored
        return replace(stored)

    def get(self, evidence_id: str) -> Optional[Evidence]:
        ev = self._t.evidence.get(evidence_id)
        return replace(ev) if ev else None

    def find(
        self,
        milestone_id: Optional[str] = None,
        building_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Evidence]:
        """Matching evidence, newest first."""
        rows = [
            ev for ev in reversed(list(self._t.evidence.values()))
            if (milestone_id is None or ev.milestone_id == milestone_id)
            and (building_id is None or ev.building_id == building_id)
        ]
        rows = sorted(rows, key=lambda ev: ev.created_at, reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return [replace(ev) for ev in rows]

    def update(self, evidence_id: str, **fields) -> Evidence:
        current = self._t.evidence[evidence_id]
        updated = replace(current, updated_at=_now(), **fields)
        self._t.evidence[evidence_id] = updated
        return replace(updated)


class ProgressStore:
    """One :class:`TimelineProgress` per building."""

    def __init__(self, tables: _Tables) -> None:
        self._t = tables

    def add(self, progress: TimelineProgress) -> TimelineProgress:
        if progress.building_id in self._t.progress:
            raise ValueError(f"progress already exists for building {progress.building_id}")
        now = _now()
        stored = replace(progress, id=progress.id or new_id(), created_at=now, updated_at=now)
        self._t.progress[stored.building_id] = stored
        return replace(stored)

    def get(self, building_id: str) -> Optional[TimelineProgress]:
        p = self._t.progress.get(building_id)
        return replace(p) if p else None

    def update(self, building_id: str, **fields) -> TimelineProgress:
        current = self._t.progress[building_id]
        updated = replace(current, updated_at=_now(), **fields)
        self._t.progress[building_id] = updated
        return replace(updated)


class InMemoryRepository:
    """
    Bundle of the three stores plus an all-or-nothing ``atomic()`` block.

    Example
    -------
    >>> repo = InMemoryRepository()
    >>> with repo.atomic():
    ...     repo.progress.add(TimelineProgress("b1", "u1"))
    >>> repo.progress.get("b1").building_id
    'b1'
    """

    def __init__(self) -> None:
        self._tables = _Tables()
        self.milestones = MilestoneStore(self._tables)
        self.evidence = EvidenceStore(self._tables)
        self.progress = ProgressStore(self._tables)

    @contextmanager
    def atomic(self) -> Iterator["InMemoryRepository"]:
        """Roll every table back to its entry state if the block raises."""
        snap = self._tables.snapshot()
        try:
            yield self
        except BaseException:
            self._tables.restore(snap)
            raise

    def close(self) -> None:
        """Nothing to release; present for parity with the DB repository."""
