"""
leasekeeper.models
==================

Dataclasses and enums for the RTM timeline: milestones, evidence, the
cached progress record, legal templates, and the result/projection types
handed back to callers.  Like the rest of the core they only use the
standard library so they can be built and compared in tests without a
database.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional, Tuple


class _StrEnum(str, Enum):
    def __str__(self) -> str:        # store/JSON friendly
        return self.value


class MilestoneType(_StrEnum):
    """The five fixed steps of an RTM claim, in process order."""
    ELIGIBILITY_ASSESSMENT = "eligibility_assessment"
    COMPANY_FORMATION = "company_formation"
    CLAIM_NOTICE_SERVED = "claim_notice_served"
    COUNTER_NOTICE_PERIOD = "counter_notice_period"
    ACQUISITION_COMPLETE = "acquisition_complete"


class MilestoneStatus(_StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class OverallStatus(_StrEnum):
    """Coarse phase label shown for a building's RTM process."""
    NOT_STARTED = "not_started"
    ELIGIBILITY_PHASE = "eligibility_phase"
    FORMATION_PHASE = "formation_phase"
    NOTICE_PHASE = "notice_phase"
    WAITING_PERIOD = "waiting_period"
    ACQUISITION_PHASE = "acquisition_phase"
    COMPLETED = "completed"
    DISPUTED = "disputed"
    ABANDONED = "abandoned"


class DocumentType(_StrEnum):
    PROOF_OF_POSTAGE = "proof_of_postage"
    SERVICE_CERTIFICATE = "service_certificate"
    CLAIM_NOTICE_COPY = "claim_notice_copy"
    COUNTER_NOTICE = "counter_notice"
    COMPANIES_HOUSE_CERTIFICATE = "companies_house_certificate"
    BANK_ACCOUNT_CONFIRMATION = "bank_account_confirmation"
    HANDOVER_DOCUMENTS = "handover_documents"
    OTHER = "other"


class FailureKind(_StrEnum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    REMOTE_IO = "remote_io"
    PARTIAL = "partial"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------
@dataclass
class Milestone:
    """
    One step of a building's RTM sequence.

    Parameters
    ----------
    building_id : str
        Building the sequence belongs to.
    created_by : str
        User who initialised the timeline.
    milestone_type : MilestoneType
        Which of the five fixed steps this is.
    title : str
        Display title.
    milestone_order : int
        1-based position in the sequence.
    statutory_deadline_days : int | None
        Nominal number of days the step is expected to take.
    calculated_deadline : datetime.date | None
        Deadline derived from an upstream milestone's completion date.
    """
    building_id: str
    created_by: str
    milestone_type: MilestoneType
    title: str
    milestone_order: int
    description: Optional[str] = None
    status: MilestoneStatus = MilestoneStatus.PENDING
    started_date: Optional[date] = None
    completed_date: Optional[date] = None
    target_completion_date: Optional[date] = None
    statutory_deadline_days: Optional[int] = None
    calculated_deadline: Optional[date] = None
    evidence_required: bool = True
    evidence_description: Optional[str] = None
    is_critical: bool = True
    completion_notes: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.milestone_order < 1:
            raise ValueError("milestone_order must be 1 or greater")

    @property
    def is_completed(self) -> bool:
        return self.status is MilestoneStatus.COMPLETED


@dataclass
class Evidence:
    """
    Metadata for a file uploaded against a milestone.

    The blob itself lives in a :pymod:`leasekeeper.blobs` store at
    ``file_path``.  Service details (date, method, recipient) only matter
    for notice-serving milestones.
    """
    milestone_id: str
    building_id: str
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
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.verified and (not self.verified_by or self.verified_at is None):
            raise ValueError("verified evidence needs verified_by and verified_at")


@dataclass
class TimelineProgress:
    """Cached per-building aggregate; recomputed from the milestones."""
    building_id: str
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
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Legal templates
# ---------------------------------------------------------------------------
class VariableType(_StrEnum):
    TEXT = "text"
    DATE = "date"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ADDRESS = "address"
    CURRENCY = "currency"


class TemplateCategory(_StrEnum):
    SECTION_20_CONSULTATION = "section_20_consultation"
    SERVICE_CHARGE_DEMAND = "service_charge_demand"
    RTM_NOTICE = "rtm_notice"
    AGM_NOTICE = "agm_notice"
    MEETING_MINUTES = "meeting_minutes"
    PRIVACY_NOTICE = "privacy_notice"
    BUILDING_SAFETY = "building_safety"
    FIRE_SAFETY = "fire_safety"
    INSURANCE_NOTICE = "insurance_notice"


class LegalFramework(_StrEnum):
    LTA_1985 = "LTA_1985"
    LTA_1987 = "LTA_1987"
    CLRA_2002 = "CLRA_2002"
    BSA_2022 = "BSA_2022"
    LFRA_2024 = "LFRA_2024"


PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


@dataclass(frozen=True)
class TemplateVariable:
    name: str
    type: VariableType = VariableType.TEXT
    required: bool = True
    description: str = ""
    default_value: Optional[str] = None


@dataclass(frozen=True)
class LegalTemplate:
    """
    A static document body with ``{{name}}`` placeholders.

    Every placeholder used in ``content`` must be declared in
    ``variables``; an undeclared one raises :class:`ValueError`.
    """
    id: str
    title: str
    content: str
    variables: Tuple[TemplateVariable, ...] = ()
    description: str = ""
    category: Optional[TemplateCategory] = None
    framework: Optional[LegalFramework] = None
    applicable_roles: Tuple[str, ...] = ()
    version: str = "1.0"
    last_updated: Optional[date] = None

    def __post_init__(self):
        declared = {v.name for v in self.variables}
        undeclared = sorted(set(PLACEHOLDER_RE.findall(self.content)) - declared)
        if undeclared:
            raise ValueError(f"undeclared placeholders in {self.id}: {', '.join(undeclared)}")

    def variable(self, name: str) -> TemplateVariable:
        for var in self.variables:
            if var.name == name:
                return var
        raise KeyError(name)


# ---------------------------------------------------------------------------
# Results and read-only projections
# ---------------------------------------------------------------------------
@dataclass
class OperationResult:
    """Outcome of a service call; failures never escape as exceptions."""
    success: bool
    error: Optional[str] = None
    kind: Optional[FailureKind] = None
    data: Any = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: FailureKind, error: str, data: Any = None) -> "OperationResult":
        return cls(success=False, error=error, kind=kind, data=data)


@dataclass
class NextDeadline:
    date: date
    description: str
    days_remaining: int
    is_urgent: bool


@dataclass
class UpcomingDeadline:
    milestone: Milestone
    days_remaining: int
    is_overdue: bool
    is_urgent: bool


@dataclass
class TimelineOverview:
    progress: TimelineProgress
    milestones: List[Milestone] = field(default_factory=list)
    current_milestone: Optional[Milestone] = None
    next_deadline: Optional[NextDeadline] = None
    recent_evidence: List[Evidence] = field(default_factory=list)
