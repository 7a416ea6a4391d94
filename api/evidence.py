"""
api.evidence
============

Evidence upload, listing, verification and download.

Uploads are JSON with the file body base64-encoded, which keeps the
endpoint usable from the dashboard without multipart handling.
"""

import base64
import binascii
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from leasekeeper.evidence import EvidenceMetadata, EvidenceService
from leasekeeper.models import DocumentType

from .deps import get_evidence_service
from .responses import unwrap

router = APIRouter(tags=["evidence"])


class UploadRequest(BaseModel):
    """Model for an evidence upload."""
    user_id: str
    filename: str
    content_base64: str
    document_type: DocumentType
    title: str
    description: Optional[str] = None
    service_date: Optional[date] = None
    service_method: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_address: Optional[str] = None


class VerifyRequest(BaseModel):
    verifier_id: str = Field(..., min_length=1)
    notes: Optional[str] = None


@router.post("/milestones/{milestone_id}/evidence", status_code=201)
async def upload_evidence(
    milestone_id: str,
    data: UploadRequest,
    svc: EvidenceService = Depends(get_evidence_service),
):
    try:
        content = base64.b64decode(data.content_base64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=422, detail="content_base64 is not valid base64")

    metadata = EvidenceMetadata(
        document_type=data.document_type,
        title=data.title,
        description=data.description,
        service_date=data.service_date,
        service_method=data.service_method,
        recipient_name=data.recipient_name,
        recipient_address=data.recipient_address,
    )
    return unwrap(svc.upload(milestone_id, data.user_id, metadata, content, data.filename))


@router.get("/milestones/{milestone_id}/evidence")
async def list_evidence(milestone_id: str, svc: EvidenceService = Depends(get_evidence_service)):
    """Evidence for a milestone, newest first."""
    return unwrap(svc.list_for_milestone(milestone_id))


@router.post("/evidence/{evidence_id}/verify")
async def verify_evidence(
    evidence_id: str,
    data: VerifyRequest,
    svc: EvidenceService = Depends(get_evidence_service),
):
    return unwrap(svc.verify(evidence_id, data.verifier_id, notes=data.notes))


@router.get("/evidence/{evidence_id}/download")
async def download_evidence(evidence_id: str, svc: EvidenceService = Depends(get_evidence_service)):
    evidence, content = unwrap(svc.download(evidence_id))
    filename = evidence.file_path.rsplit("/", 1)[-1]
    return Response(
        content=content,
        media_type=evidence.file_type or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
