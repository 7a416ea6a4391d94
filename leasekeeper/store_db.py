"""
leasekeeper.store_db
====================

SQLite-backed implementation of the :pymod:`leasekeeper.store` surface.

The stores wrap the table models in :pymod:`leasekeeper.db` so that code
written against the in-memory repository can switch to a persistent store
without changing its calls.  Every SQLAlchemy failure surfaces as
:class:`~leasekeeper.errors.StoreError`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, List, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from leasekeeper.db import EvidenceRow, MilestoneRow, ProgressRow, SessionLocal
from leasekeeper.errors import StoreError
from leasekeeper.models import Evidence, Milestone, TimelineProgress
from leasekeeper.store import new_id

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _DBStore:
    def __init__(self, repo: "DBRepository") -> None:
        self._repo = repo

    @property
    def _s(self) -> Session:
        return self._repo.session


class DBMilestoneStore(_DBStore):
    def add_many(self, milestones: List[Milestone]) -> List[Milestone]:
        now = _now()
        rows = [MilestoneRow.from_record(m) for m in milestones]
        for row in rows:
            row.id = row.id or new_id()
            row.created_at = row.updated_at = now

        def _apply() -> List[Milestone]:
            self._s.add_all(rows)
            return [r.to_record() for r in rows]

        return self._repo.write(_apply)

    def get(self, milestone_id: str) -> Optional[Milestone]:
        row = self._repo.read(lambda: self._s.get(MilestoneRow, milestone_id))
        return row.to_record() if row else None

    def for_building(self, building_id: str) -> List[Milestone]:
        stmt = (
            select(MilestoneRow)
            .where(MilestoneRow.building_id == building_id)
            .order_by(MilestoneRow.milestone_order)
        )
        rows = self._repo.read(lambda: self._s.exec(stmt).all())
        return [row.to_record() for row in rows]

    def update(self, milestone_id: str, **fields) -> Milestone:
        def _apply() -> Milestone:
            row = self._s.get(MilestoneRow, milestone_id)
            if row is None:
                raise KeyError(milestone_id)
            _assign(row, fields)
            self._s.add(row)
            return row.to_record()

        return self._repo.write(_apply)


class DBEvidenceStore(_DBStore):
    def add(self, evidence: Evidence) -> Evidence:
        row = EvidenceRow.from_record(evidence)
        row.id = row.id or new_id()
        row.created_at = row.updated_at = _now()

        def _apply() -> Evidence:
            self._s.add(row)
            return row.to_record()

        return self._repo.write(_apply)

    def get(self, evidence_id: str) -> Optional[Evidence]:
        row = self._repo.read(lambda: self._s.get(EvidenceRow, evidence_id))
        return row.to_record() if row else None

    def find(
        self,
        milestone_id: Optional[str] = None,
        building_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Evidence]:
        stmt = select(EvidenceRow)
        if milestone_id is not None:
            stmt = stmt.where(EvidenceRow.milestone_id == milestone_id)
        if building_id is not None:
            stmt = stmt.where(EvidenceRow.building_id == building_id)
        stmt = stmt.order_by(EvidenceRow.created_at.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        rows = self._repo.read(lambda: self._s.exec(stmt).all())
        return [row.to_record() for row in rows]

    def update(self, evidence_id: str, **fields) -> Evidence:
        def _apply() -> Evidence:
            row = self._s.get(EvidenceRow, evidence_id)
            if row is None:
                raise KeyError(evidence_id)
            _assign(row, fields)
            record = row.to_record()  # runs the verification invariant
            self._s.add(row)
            return record

        return self._repo.write(_apply)


class DBProgressStore(_DBStore):
    def _row(self, building_id: str) -> Optional[ProgressRow]:
        stmt = select(ProgressRow).where(ProgressRow.building_id == building_id)
        return self._s.exec(stmt).first()

    def add(self, progress: TimelineProgress) -> TimelineProgress:
        def _apply() -> TimelineProgress:
            if self._row(progress.building_id) is not None:
                raise ValueError(f"progress already exists for building {progress.building_id}")
            row = ProgressRow.from_record(progress)
            row.id = row.id or new_id()
            row.created_at = row.updated_at = _now()
            self._s.add(row)
            return row.to_record()

        return self._repo.write(_apply)

    def get(self, building_id: str) -> Optional[TimelineProgress]:
        row = self._repo.read(lambda: self._row(building_id))
        return row.to_record() if row else None

    def update(self, building_id: str, **fields) -> TimelineProgress:
        def _apply() -> TimelineProgress:
            row = self._row(building_id)
            if row is None:
                raise KeyError(building_id)
            _assign(row, fields)
            self._s.add(row)
            return row.to_record()

        return self._repo.write(_apply)


def _assign(row, fields: dict) -> None:
    for name, value in fields.items():
        if not hasattr(row, name):
            raise AttributeError(f"{type(row).__name__} has no field {name!r}")
        setattr(row, name, value)
    row.updated_at = _now()


class DBRepository:
    """
    Drop-in replacement for :class:`~leasekeeper.store.InMemoryRepository`
    backed by SQLite.

    Writes commit immediately unless they run inside ``atomic()``, in which
    case the outermost block commits once or rolls everything back.
    """

    def __init__(self, session: Session | None = None) -> None:
        self.session: Session = session or SessionLocal()
        self._depth = 0
        self.milestones = DBMilestoneStore(self)
        self.evidence = DBEvidenceStore(self)
        self.progress = DBProgressStore(self)

    # --------------------------------------------------------- plumbing
    def read(self, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except SQLAlchemyError as exc:
            logger.error(f"Database read failed: {exc}")
            self.session.rollback()
            raise StoreError(str(exc)) from exc

    def write(self, fn: Callable[[], T]) -> T:
        try:
            result = fn()
            if self._depth == 0:
                self.session.commit()
            else:
                self.session.flush()
            return result
        except SQLAlchemyError as exc:
            logger.error(f"Database write failed: {exc}")
            if self._depth == 0:
                self.session.rollback()
            raise StoreError(str(exc)) from exc
        except (KeyError, ValueError, AttributeError):
            if self._depth == 0:
                self.session.rollback()
            raise

    @contextmanager
    def atomic(self) -> Iterator["DBRepository"]:
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                self.session.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            try:
                self.session.commit()
            except SQLAlchemyError as exc:
                self.session.rollback()
                raise StoreError(str(exc)) from exc

    # ----------------------------------------------------- context manager
    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "DBRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
