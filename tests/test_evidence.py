"""
tests/test_evidence.py
======================

Unit tests for leasekeeper.evidence.EvidenceService and the blob stores.
"""

from datetime import date

import pytest

from conftest import BUILDING
from leasekeeper.blobs import FileBlobStore, MemoryBlobStore
from leasekeeper.errors import StoreError
from leasekeeper.evidence import EvidenceMetadata, EvidenceService
from leasekeeper.models import DocumentType, FailureKind, MilestoneType as MT
from leasekeeper.timeline import TimelineService

PDF = b"%PDF-1.4 proof of postage"


def _meta(**kw):
    base = dict(document_type=DocumentType.PROOF_OF_POSTAGE, title="Royal Mail receipt",
                service_date=date(2024, 1, 15), service_method="first class post",
                recipient_name="Freehold Estates Ltd")
    base.update(kw)
    return EvidenceMetadata(**base)


@pytest.fixture
def claim(milestones):
    return milestones[MT.CLAIM_NOTICE_SERVED]


@pytest.fixture
def service(repo, blobs):
    return EvidenceService(repo, blobs)


def test_upload_stores_blob_and_record(service, claim, blobs):
    result = service.upload(claim.id, "alice", _meta(), PDF, "Receipt.PDF")
    assert result.success

    ev = result.data
    assert ev.verified is False
    assert ev.building_id == BUILDING
    assert ev.file_size == len(PDF)
    assert ev.file_type == "application/pdf"
    assert ev.file_path.startswith(f"{BUILDING}/{claim.id}/")
    assert ev.file_path.endswith(".pdf")
    assert blobs.download(ev.file_path) == PDF


def test_upload_unknown_milestone_writes_nothing(service, blobs):
    result = service.upload("nope", "alice", _meta(), PDF, "receipt.pdf")
    assert result.kind is FailureKind.NOT_FOUND
    assert len(blobs) == 0


def test_blob_failure(repo, claim, monkeypatch):
    blobs = MemoryBlobStore()

    def _boom(path, content):
        raise StoreError("bucket offline")

    monkeypatch.setattr(blobs, "upload", _boom)
    result = EvidenceService(repo, blobs).upload(claim.id, "alice", _meta(), PDF, "receipt.pdf")

    assert result.kind is FailureKind.REMOTE_IO
    assert repo.evidence.find(milestone_id=claim.id) == []


def test_metadata_failure_leaves_orphaned_blob(service, claim, repo, blobs, monkeypatch, caplog):
    def _boom(evidence):
        raise StoreError("insert failed")

    monkeypatch.setattr(repo.evidence, "add", _boom)
    result = service.upload(claim.id, "alice", _meta(), PDF, "receipt.pdf")

    assert result.kind is FailureKind.REMOTE_IO
    orphan = result.data["file_path"]
    assert blobs.exists(orphan)
    assert "orphaned" in caplog.text


def test_verify_twice_keeps_first_verification(service, claim):
    ev = service.upload(claim.id, "alice", _meta(), PDF, "receipt.pdf").data

    first = service.verify(ev.id, "bob", notes="checked against post office log")
    assert first.success
    assert first.data.verified
    assert first.data.verified_by == "bob"
    assert first.data.verified_at is not None

    second = service.verify(ev.id, "carol")
    assert second.success
    assert second.data.verified_by == "bob"
    assert second.data.verified_at == first.data.verified_at
    assert second.data.verification_notes == "checked against post office log"


def test_verify_unknown(service):
    assert service.verify("nope", "bob").kind is FailureKind.NOT_FOUND


def test_verify_needs_verifier(service, claim, repo):
    ev = service.upload(claim.id, "alice", _meta(), PDF, "receipt.pdf").data

    for verifier in ("", "   "):
        result = service.verify(ev.id, verifier, notes="ok")
        assert result.kind is FailureKind.VALIDATION
    assert repo.evidence.get(ev.id).verified is False


def test_upload_rejects_unsafe_building_path(repo, blobs):
    svc = TimelineService(repo)
    assert svc.initialize("..", "alice").success
    milestone = svc.get_milestones("..").data[0]

    result = EvidenceService(repo, blobs).upload(milestone.id, "alice", _meta(), PDF, "receipt.pdf")
    assert result.kind is FailureKind.VALIDATION
    assert len(blobs) == 0
    assert repo.evidence.find(milestone_id=milestone.id) == []


def test_listing_is_newest_first(service, claim, milestones):
    a = service.upload(claim.id, "alice", _meta(title="first"), PDF, "a.pdf").data
    b = service.upload(claim.id, "alice", _meta(title="second"), PDF, "b.pdf").data
    other = milestones[MT.COMPANY_FORMATION]
    c = service.upload(other.id, "alice", _meta(document_type=DocumentType.COMPANIES_HOUSE_CERTIFICATE,
                                                title="certificate"), PDF, "c.pdf").data

    assert [e.id for e in service.list_for_milestone(claim.id).data] == [b.id, a.id]
    assert [e.id for e in service.recent_for_building(BUILDING).data] == [c.id, b.id, a.id]
    assert [e.id for e in service.recent_for_building(BUILDING, limit=1).data] == [c.id]


def test_overview_shows_recent_evidence(service, claim, timeline):
    service.upload(claim.id, "alice", _meta(), PDF, "receipt.pdf")
    assert len(timeline.get_overview(BUILDING).data.recent_evidence) == 1


def test_download(service, claim):
    ev = service.upload(claim.id, "alice", _meta(), PDF, "receipt.pdf").data
    record, content = service.download(ev.id).data
    assert record.id == ev.id
    assert content == PDF
    assert service.download("nope").kind is FailureKind.NOT_FOUND


def test_file_blob_store(tmp_path):
    store = FileBlobStore(tmp_path)
    key = store.upload("b1/m1/file.pdf", PDF)
    assert (tmp_path / "b1" / "m1" / "file.pdf").read_bytes() == PDF
    assert store.download(key) == PDF
    assert store.exists(key)
    store.delete(key)
    assert not store.exists(key)
    with pytest.raises(StoreError):
        store.download(key)


def test_blob_paths_must_stay_inside_root(tmp_path):
    store = FileBlobStore(tmp_path)
    with pytest.raises(ValueError):
        store.upload("../escape.pdf", PDF)
    with pytest.raises(ValueError):
        MemoryBlobStore().upload("/abs/path.pdf", PDF)
