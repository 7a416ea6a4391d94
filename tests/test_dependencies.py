"""
tests/test_dependencies.py
==========================

Unit tests for leasekeeper.dependencies.DependencyGraph
"""

import pytest

from leasekeeper.dependencies import STATUTORY_GRAPH, DependencyGraph, statutory_graph
from leasekeeper.models import MilestoneType as MT


def test_statutory_fan_out():
    assert STATUTORY_GRAPH.dated_dependents(MT.CLAIM_NOTICE_SERVED) == [
        (MT.COUNTER_NOTICE_PERIOD, 30),
        (MT.ACQUISITION_COMPLETE, 90),
    ]
    assert STATUTORY_GRAPH.dated_dependents(MT.ELIGIBILITY_ASSESSMENT) == []


def test_enablement_edge_has_no_offset():
    assert STATUTORY_GRAPH.dependents(MT.COMPANY_FORMATION) == [MT.CLAIM_NOTICE_SERVED]
    assert STATUTORY_GRAPH.offset(MT.COMPANY_FORMATION, MT.CLAIM_NOTICE_SERVED) is None
    assert STATUTORY_GRAPH.dated_dependents(MT.COMPANY_FORMATION) == []


def test_custom_offsets():
    g = statutory_graph(counter_notice_days=31, acquisition_days=92)
    assert g.offset(MT.CLAIM_NOTICE_SERVED, MT.ACQUISITION_COMPLETE) == 92


def test_cycle_rejected():
    g = DependencyGraph()
    g.link(MT.COMPANY_FORMATION, MT.CLAIM_NOTICE_SERVED)
    g.link(MT.CLAIM_NOTICE_SERVED, MT.COUNTER_NOTICE_PERIOD, 30)
    with pytest.raises(ValueError):
        g.link(MT.COUNTER_NOTICE_PERIOD, MT.COMPANY_FORMATION)
    with pytest.raises(ValueError):
        g.link(MT.COMPANY_FORMATION, MT.COMPANY_FORMATION)


def test_missing_edge_offset_raises():
    with pytest.raises(KeyError):
        DependencyGraph().offset(MT.COMPANY_FORMATION, MT.CLAIM_NOTICE_SERVED)


def test_to_json():
    data = STATUTORY_GRAPH.to_json()
    assert [n["id"] for n in data["nodes"]] == [str(t) for t in MT]
    assert {"source": "claim_notice_served", "target": "counter_notice_period", "offset_days": 30} in data["links"]
    assert len(data["links"]) == 3
