"""
tests/test_viz.py
=================

Smoke tests for the plotting helpers: each writes a non-empty PNG.
"""

from datetime import date

from conftest import BUILDING
from leasekeeper.models import MilestoneType as MT
from leasekeeper.viz import plot_dependency_graph, plot_timeline, status_summary


def test_status_summary(tmp_path, timeline, milestones):
    timeline.complete_milestone(milestones[MT.ELIGIBILITY_ASSESSMENT].id, date(2024, 1, 2))
    out = status_summary(timeline.get_milestones(BUILDING).data, out_path=tmp_path / "status.png")
    assert out.exists() and out.stat().st_size > 0


def test_plot_timeline(tmp_path, timeline, milestones):
    timeline.complete_milestone(milestones[MT.CLAIM_NOTICE_SERVED].id, date(2024, 1, 15))
    out = plot_timeline(timeline.get_milestones(BUILDING).data, today=date(2024, 2, 1),
                        out_path=tmp_path / "charts" / "timeline.png")
    assert out.exists() and out.stat().st_size > 0


def test_plot_dependency_graph(tmp_path):
    out = plot_dependency_graph(out_path=tmp_path / "deps.png")
    assert out.exists() and out.stat().st_size > 0
