"""
leasekeeper.evidence
====================

Evidence uploads and verification for RTM milestones.

Blobs and metadata live in different stores and are not written in one
transaction: if the metadata insert fails after the blob was stored, the
blob is left where it is and the failure is reported.
"""

from __future__ import annotations

import logging
import mimetypes
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import PurePosixPath
from typing import Optional

from . import events as ev
from .errors import StoreError
from .events import EventBus
from .models import DocumentType, Evidence, FailureKind, OperationResult

logger = logging.getLogger(__name__)


@dataclass
class EvidenceMetadata:
    """Caller-supplied description of an upload."""
    document_type: DocumentType
    title: str
    description: Optional[str] = None
    service_date: Optional[date] = None
    service_method: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_address: Optional[str] = None


def blob_path(building_id: str, milestone_id: str, filename: str) -> str:
    """``{building}/{milestone}/{uuid}.{ext}``; the extension is kept from *filename*."""
    suffix = PurePosixPath(filename).suffix.lower()
    return f"{building_id}/{milestone_id}/{uuid.uuid4()}{suffix}"


class EvidenceService:
    """Upload, verify and list evidence against a repository and a blob store."""

    def __init__(self, repository, blobs, events: Optional[EventBus] = None) -> None:
        self.repo = repository
        self.blobs = blobs
        self.events = events or EventBus()

    def upload(
        self,
        milestone_id: str,
        user_id: str,
        metadata: EvidenceMetadata,
        content: bytes,
        filename: str,
    ) -> OperationResult:
        """Store *content* and record it against the milestone (unverified)."""
        try:
            milestone = self.repo.milestones.get(milestone_id)
        except StoreError as exc:
            logger.error(f"Error loading milestone {milestone_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))
        if milestone is None:
            return OperationResult.fail(FailureKind.NOT_FOUND, f"milestone {milestone_id} not found")

        try:
            path = self.blobs.upload(blob_path(milestone.building_id, milestone_id, filename), content)
        except ValueError as exc:
            logger.warning(f"Rejected evidence file {filename}: {exc}")
            return OperationResult.fail(FailureKind.VALIDATION, str(exc))
        except StoreError as exc:
            logger.error(f"Error uploading evidence file {filename}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))

        try:
            evidence = self.repo.evidence.add(
                Evidence(
                    milestone_id=milestone_id,
                    building_id=milestone.building_id,
                    uploaded_by=user_id,
                    document_type=metadata.document_type,
                    title=metadata.title,
                    description=metadata.description,
                    file_path=path,
                    file_size=len(content),
                    file_type=mimetypes.guess_type(filename)[0],
                    service_date=metadata.service_date,
                    service_method=metadata.service_method,
                    recipient_name=metadata.recipient_name,
                    recipient_address=metadata.recipient_address,
                    verified=False,
                )
            )
        except StoreError as exc:
            logger.warning(f"Evidence record not saved; blob {path} left orphaned: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc), data={"file_path": path})

        logger.info(f"Uploaded evidence {evidence.id} for milestone {milestone_id}")
        self.events.publish(ev.EVIDENCE_UPLOADED, milestone.building_id)
        return OperationResult.ok(evidence)

    def verify(self, evidence_id: str, verifier_id: str, notes: Optional[str] = None) -> OperationResult:
        """
        Mark evidence verified.

        Verifying an already verified record succeeds without touching it,
        so the first verifier and timestamp are kept.
        """
        if not verifier_id or not verifier_id.strip():
            return OperationResult.fail(FailureKind.VALIDATION, "verifier_id is required")
        try:
            evidence = self.repo.evidence.get(evidence_id)
            if evidence is None:
                return OperationResult.fail(FailureKind.NOT_FOUND, f"evidence {evidence_id} not found")
            if evidence.verified:
                return OperationResult.ok(evidence)

            evidence = self.repo.evidence.update(
                evidence_id,
                verified=True,
                verified_by=verifier_id,
                verified_at=datetime.now(timezone.utc),
                verification_notes=notes,
            )
        except (StoreError, KeyError) as exc:
            logger.error(f"Error verifying evidence {evidence_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))

        logger.info(f"Evidence {evidence_id} verified by {verifier_id}")
        self.events.publish(ev.EVIDENCE_VERIFIED, evidence.building_id)
        return OperationResult.ok(evidence)

    def list_for_milestone(self, milestone_id: str) -> OperationResult:
        """Evidence for one milestone, newest first."""
        try:
            return OperationResult.ok(self.repo.evidence.find(milestone_id=milestone_id))
        except StoreError as exc:
            logger.error(f"Error getting evidence for milestone {milestone_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))

    def recent_for_building(self, building_id: str, limit: int = 5) -> OperationResult:
        try:
            return OperationResult.ok(self.repo.evidence.find(building_id=building_id, limit=limit))
        except StoreError as exc:
            logger.error(f"Error getting evidence for building {building_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))

    def download(self, evidence_id: str) -> OperationResult:
        """``data`` is a ``(Evidence, bytes)`` pair."""
        try:
            evidence = self.repo.evidence.get(evidence_id)
            if evidence is None:
                return OperationResult.fail(FailureKind.NOT_FOUND, f"evidence {evidence_id} not found")
            return OperationResult.ok((evidence, self.blobs.download(evidence.file_path)))
        except StoreError as exc:
            logger.error(f"Error downloading evidence {evidence_id}: {exc}")
            return OperationResult.fail(FailureKind.REMOTE_IO, str(exc))
