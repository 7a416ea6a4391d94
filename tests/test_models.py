"""
tests/test_models.py
====================

Unit tests for the dataclasses and enums defined in leasekeeper.models.

Run:  pytest -q
"""

from datetime import datetime, timezone

import pytest

from leasekeeper.models import (
    DocumentType,
    Evidence,
    FailureKind,
    LegalTemplate,
    Milestone,
    MilestoneStatus,
    MilestoneType,
    OperationResult,
    TemplateVariable,
)


def _milestone(**kw):
    base = dict(building_id="b1", created_by="u1", milestone_type=MilestoneType.COMPANY_FORMATION,
                title="RTM Company Formation", milestone_order=2)
    base.update(kw)
    return Milestone(**base)


def test_default_status():
    """New milestone defaults to PENDING."""
    ms = _milestone()
    assert ms.status is MilestoneStatus.PENDING
    assert not ms.is_completed


def test_str_on_enums():
    """Enum __str__ returns the stored value."""
    assert str(MilestoneStatus.IN_PROGRESS) == "in_progress"
    assert str(MilestoneType.CLAIM_NOTICE_SERVED) == "claim_notice_served"
    assert MilestoneStatus("completed") is MilestoneStatus.COMPLETED


def test_order_must_be_positive():
    with pytest.raises(ValueError):
        _milestone(milestone_order=0)


def test_verified_evidence_needs_verifier():
    kw = dict(milestone_id="m1", building_id="b1", uploaded_by="u1",
              document_type=DocumentType.PROOF_OF_POSTAGE, title="Receipt", file_path="b1/m1/x.pdf")
    with pytest.raises(ValueError):
        Evidence(verified=True, **kw)
    ev = Evidence(verified=True, verified_by="bob", verified_at=datetime.now(timezone.utc), **kw)
    assert ev.verified


def test_template_rejects_undeclared_placeholder():
    with pytest.raises(ValueError, match="date"):
        LegalTemplate("t", "T", "{{name}} on {{date}}", (TemplateVariable("name"),))


def test_template_variable_lookup():
    t = LegalTemplate("t", "T", "{{name}}", (TemplateVariable("name", required=False),))
    assert t.variable("name").required is False
    with pytest.raises(KeyError):
        t.variable("other")


def test_operation_result_helpers():
    ok = OperationResult.ok({"x": 1})
    assert ok.success and ok.kind is None and ok.data == {"x": 1}

    bad = OperationResult.fail(FailureKind.NOT_FOUND, "missing")
    assert not bad.success
    assert bad.kind is FailureKind.NOT_FOUND
    assert bad.error == "missing"
