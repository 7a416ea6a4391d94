"""
leasekeeper.db
==============

SQLite persistence layer for leasekeeper.

This module exposes:

* ``engine`` – a global SQLModel engine pointing at ``settings.DB_URL``
* ``SessionLocal`` – a session factory used via ``with SessionLocal() as s:``
* ``create_all()`` – helper to create tables at first run
* one ``*Row`` table model per record type, with converters to and from
  the plain dataclasses in :pymod:`leasekeeper.models`
"""

from __future__ import annotations

from dataclasses import fields
from datetime import date, datetime
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import Field, Session, SQLModel, create_engine

from leasekeeper.models import (
    DocumentType,
    Evidence,
    Milestone,
    MilestoneStatus,
    MilestoneType,
    OverallStatus,
    TimelineProgress,
)
from leasekeeper.settings import DB_ECHO, DB_URL


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
engine = create_engine(DB_URL, echo=DB_ECHO)


# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
def SessionLocal(bind: Engine | None = None) -> Session:  # noqa: N802 (factory camel‑case for consistency with FastAPI docs)
    """Return a new Session bound to *bind* or the global engine."""
    return Session(bind or engine)


# ---------------------------------------------------------------------------
# ORM models mirroring leasekeeper.models
# ---------------------------------------------------------------------------
def _to_record(row: SQLModel, record_cls):
    # getattr (not model_dump) so expired rows are refreshed from the DB
    return record_cls(**{f.name: getattr(row, f.name) for f in fields(record_cls)})


class MilestoneRow(SQLModel, table=True):
    """SQLite-backed representation of a :class:`leasekeeper.models.Milestone`."""

    __tablename__ = "rtm_milestones"

    id: str = Field(primary_key=True)
    building_id: str = Field(index=True)
    created_by: str
    milestone_type: MilestoneType
    title: str
    description: Optional[str] = None
    status: MilestoneStatus = MilestoneStatus.PENDING
    started_date: Optional[date] = None
    completed_date: Optional[date] = None
    target_completion_date: Optional[date] = None
    statutory_deadline_days: Optional[int] = None
    calculated_deadline: Optional[date] = None
    evidence_required: bool = True
    evidence_description: Optional[str] = None
    milestone_order: int
    is_critical: bool = True
    completion_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, ms: Milestone) -> "MilestoneRow":
        return cls(**vars(ms))

    def to_record(self) -> Milestone:
        return _to_record(self, Milestone)


class EvidenceRow(SQLModel, table=True):
    """SQLite-backed representation of :class:`leasekeeper.models.Evidence`."""

    __tablename__ = "rtm_evidence"

    id: str = Field(primary_key=True)
    milestone_id: str = Field(index=True, foreign_key="rtm_milestones.id")
    building_id: str = Field(index=True)
    uploaded_by: str
    document_type: DocumentType
    title: str
    file_path: str
    description: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    service_date: Optional[date] = None
    service_method: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_address: Optional[str] = None
    verified: bool = False
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    verification_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, ev: Evidence) -> "EvidenceRow":
        return cls(**vars(ev))

    def to_record(self) -> Evidence:
        return _to_record(self, Evidence)


class ProgressRow(SQLModel, table=True):
    """SQLite-backed representation of :class:`leasekeeper.models.TimelineProgress`."""

    __tablename__ = "rtm_timeline_progress"

    id: str = Field(primary_key=True)
    building_id: str = Field(index=True, unique=True)
    created_by: str
    overall_status: OverallStatus = OverallStatus.NOT_STARTED
    current_milestone_id: Optional[str] = None
    process_started_date: Optional[date] = None
    claim_notice_served_date: Optional[date] = None
    counter_notice_deadline: Optional[date] = None
    acquisition_date: Optional[date] = None
    process_completed_date: Optional[date] = None
    total_milestones: int = 0
    completed_milestones: int = 0
    progress_percentage: float = 0.0
    next_action_required: Optional[str] = None
    next_deadline: Optional[date] = None
    days_until_next_deadline: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, p: TimelineProgress) -> "ProgressRow":
        return cls(**vars(p))

    def to_record(self) -> TimelineProgress:
        return _to_record(self, TimelineProgress)


# ---------------------------------------------------------------------------
# Utility: create tables
# ---------------------------------------------------------------------------
def create_all(bind: Engine | None = None) -> None:
    """Create all tables for imported SQLModel subclasses."""
    SQLModel.metadata.create_all(bind or engine)


# ---------------------------------------------------------------------------
# Lightweight CLI
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    """
    Quick bootstrap helper.

    Examples
    --------
    $ python -m leasekeeper.db --create        # first‑time table creation
    """
    import argparse

    parser = argparse.ArgumentParser(prog="python -m leasekeeper.db", description="leasekeeper DB utilities")
    parser.add_argument("--create", action="store_true", help="create tables")
    args = parser.parse_args()

    if args.create:
        create_all()
        print(f"✅ leasekeeper schema initialised at {DB_URL}")
