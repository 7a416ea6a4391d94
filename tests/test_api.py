"""
tests/test_api.py
=================

Tests for the HTTP layer.

These use FastAPI TestClient against the real app, with the repository,
blob store and event bus swapped for in-memory versions through
``app.dependency_overrides``.
"""

import base64

import pytest
from fastapi.testclient import TestClient

from api.deps import get_blobs, get_events, get_repository
from api.main import app
from leasekeeper.blobs import MemoryBlobStore
from leasekeeper.errors import StoreError
from leasekeeper.events import EventBus
from leasekeeper.store import InMemoryRepository

BUILDING = "station-mansions"


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def client(repo):
    blobs, events = MemoryBlobStore(), EventBus()
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_blobs] = lambda: blobs
    app.dependency_overrides[get_events] = lambda: events
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def milestones(client):
    assert client.post(f"/buildings/{BUILDING}/timeline", json={"user_id": "alice"}).status_code == 201
    return {m["milestone_type"]: m for m in client.get(f"/buildings/{BUILDING}/milestones").json()}


# ---------------------------------------------------------------------------
# Timeline
# ---------------------------------------------------------------------------
def test_health_check(client):
    assert client.get("/").json()["status"] == "ok"


def test_initialize_twice(client, milestones):
    again = client.post(f"/buildings/{BUILDING}/timeline", json={"user_id": "bob"})
    assert again.status_code == 200
    assert again.json() == {"created": False}
    assert len(milestones) == 5
    assert milestones["eligibility_assessment"]["status"] == "pending"


def test_complete_claim_notice(client, milestones):
    claim_id = milestones["claim_notice_served"]["id"]
    resp = client.post(f"/milestones/{claim_id}/complete",
                       json={"completion_date": "2024-01-15", "notes": "hand delivered"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"
    assert resp.json()["completed_date"] == "2024-01-15"

    overview = client.get(f"/buildings/{BUILDING}/timeline", params={"today": "2024-02-10"}).json()
    assert overview["progress"]["overall_status"] == "waiting_period"
    assert overview["progress"]["counter_notice_deadline"] == "2024-02-14"
    assert overview["next_deadline"]["days_remaining"] == 4
    assert overview["next_deadline"]["is_urgent"] is True

    deadlines = client.get(f"/buildings/{BUILDING}/deadlines", params={"today": "2024-02-10"}).json()
    assert [d["milestone"]["milestone_type"] for d in deadlines] == ["counter_notice_period"]

    schedule = client.get(f"/buildings/{BUILDING}/deadlines/schedule").json()
    assert schedule[3]["calculated_date"] == "2024-04-14"


def test_complete_errors(client, milestones):
    mid = milestones["eligibility_assessment"]["id"]
    body = {"completion_date": "2024-01-02"}
    assert client.post(f"/milestones/{mid}/complete", json=body).status_code == 200
    assert client.post(f"/milestones/{mid}/complete", json=body).status_code == 422
    assert client.post("/milestones/nope/complete", json=body).status_code == 404


def test_partial_failure_is_207(client, milestones, repo, monkeypatch):
    def _boom(*args, **kwargs):
        raise StoreError("progress table unavailable")

    monkeypatch.setattr(repo.progress, "update", _boom)
    mid = milestones["claim_notice_served"]["id"]
    resp = client.post(f"/milestones/{mid}/complete", json={"completion_date": "2024-01-15"})

    assert resp.status_code == 207
    assert resp.json()["kind"] == "partial"
    assert resp.json()["data"]["id"] == mid


def test_refresh(client, milestones):
    mid = milestones["claim_notice_served"]["id"]
    client.post(f"/milestones/{mid}/complete", json={"completion_date": "2024-01-15"})

    resp = client.post(f"/buildings/{BUILDING}/timeline/refresh", json={"today": "2024-02-20"})
    assert resp.json() == {"overdue": [milestones["counter_notice_period"]["id"]]}
    assert client.post("/buildings/nowhere/timeline/refresh").status_code == 404


def test_unknown_building_overview(client):
    assert client.get("/buildings/nowhere/timeline").status_code == 404


def test_calculate_deadline(client):
    resp = client.get("/deadlines/calculate", params={"step": "claim_notice_served", "base_date": "2024-01-15"})
    assert resp.json() == {
        "claim_notice_served": "2024-01-15",
        "counter_notice_deadline": "2024-02-14",
        "acquisition_date": "2024-04-14",
    }
    bad = client.get("/deadlines/calculate", params={"step": "nope", "base_date": "2024-01-15"})
    assert bad.status_code == 422


def test_dependency_graph(client):
    assert len(client.get("/dependencies").json()["links"]) == 3


# ---------------------------------------------------------------------------
# Evidence
# ---------------------------------------------------------------------------
def _upload(client, milestone_id, content=b"%PDF-1.4 receipt"):
    return client.post(
        f"/milestones/{milestone_id}/evidence",
        json={
            "user_id": "alice",
            "filename": "receipt.pdf",
            "content_base64": base64.b64encode(content).decode(),
            "document_type": "proof_of_postage",
            "title": "Royal Mail receipt",
            "service_date": "2024-01-15",
        },
    )


def test_evidence_flow(client, milestones):
    mid = milestones["claim_notice_served"]["id"]
    resp = _upload(client, mid)
    assert resp.status_code == 201
    ev = resp.json()
    assert ev["verified"] is False

    assert [e["id"] for e in client.get(f"/milestones/{mid}/evidence").json()] == [ev["id"]]

    verified = client.post(f"/evidence/{ev['id']}/verify", json={"verifier_id": "bob"}).json()
    assert verified["verified"] is True
    again = client.post(f"/evidence/{ev['id']}/verify", json={"verifier_id": "carol"}).json()
    assert again["verified_by"] == "bob"
    assert again["verified_at"] == verified["verified_at"]

    download = client.get(f"/evidence/{ev['id']}/download")
    assert download.content == b"%PDF-1.4 receipt"
    assert download.headers["content-type"] == "application/pdf"


def test_evidence_errors(client, milestones):
    assert _upload(client, "nope").status_code == 404

    bad = client.post(
        f"/milestones/{milestones['claim_notice_served']['id']}/evidence",
        json={"user_id": "alice", "filename": "x.pdf", "content_base64": "***",
              "document_type": "other", "title": "x"},
    )
    assert bad.status_code == 422
    assert client.post("/evidence/nope/verify", json={"verifier_id": "bob"}).status_code == 404

    ev_id = _upload(client, milestones["claim_notice_served"]["id"]).json()["id"]
    assert client.post(f"/evidence/{ev_id}/verify", json={"verifier_id": ""}).status_code == 422
    assert client.get("/evidence/nope/download").status_code == 404


# ---------------------------------------------------------------------------
# Templates and eligibility
# ---------------------------------------------------------------------------
def test_list_and_get_templates(client):
    assert len(client.get("/templates").json()) == 3
    agm = client.get("/templates", params={"category": "agm_notice"}).json()
    assert [t["id"] for t in agm] == ["agm-notice"]
    assert client.get("/templates", params={"role": "management-company"}).json()[0]["id"] == \
        "section-20-notice-intention"

    detail = client.get("/templates/agm-notice").json()
    assert "{{companyName}}" in detail["content"]
    assert client.get("/templates/nope").status_code == 404


def test_render_template(client):
    strict = client.post("/templates/agm-notice/render", json={"values": {"companyName": "Harbour House RTM Ltd"}})
    assert strict.status_code == 422
    assert strict.json()["detail"]["missing"] == ["meetingDate", "meetingTime", "agenda", "secretaryName"]

    loose = client.post("/templates/agm-notice/render",
                        json={"values": {"companyName": "Harbour House RTM Ltd"}, "strict": False}).json()
    assert "Harbour House RTM Ltd" in loose["content"]
    assert loose["missing"] == ["meetingDate", "meetingTime", "agenda", "secretaryName"]

    values = {"companyName": "Harbour House RTM Ltd", "meetingDate": "1 March 2024", "meetingTime": "7pm",
              "agenda": "1. Accounts", "secretaryName": "A. Patel"}
    full = client.post("/templates/agm-notice/render", json={"values": values}).json()
    assert "{{" not in full["content"]
    assert "at Online." in full["content"]


def test_eligibility(client):
    resp = client.post("/eligibility", json={"total_flats": 12, "residential_flats": 12,
                                             "average_lease_length": 99, "participating_leaseholders": 9})
    assert resp.status_code == 200
    assert resp.json()["eligible"] is True
    assert client.post("/eligibility", json={"total_flats": -1, "residential_flats": 0}).status_code == 422
