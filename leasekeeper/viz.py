"""
leasekeeper.viz
===============

Plotting helpers for reports and the CLI demo: a per-building milestone
timeline, a status breakdown, and the milestone dependency graph.

Outputs are PNGs written to the *images/* folder by default (created on
first save).  Filenames can be overridden via keyword argument.
"""
from __future__ import annotations

import os
from collections import Counter
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import networkx as nx  # noqa: E402

from .dependencies import STATUTORY_GRAPH, DependencyGraph  # noqa: E402
from .models import Milestone, MilestoneStatus  # noqa: E402

# default output dir
_IMG_DIR = Path("images")

STATUS_COLOURS = {
    MilestoneStatus.PENDING: "#adb5bd",
    MilestoneStatus.IN_PROGRESS: "#f4a261",
    MilestoneStatus.COMPLETED: "#2b9348",
    MilestoneStatus.OVERDUE: "#d62828",
}


def _save(out_path: str | os.PathLike) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_path, dpi=120, bbox_inches="tight")
    plt.close()
    return out_path


# ---------------------------------------------------------------------
# Plot 1: bar chart of milestones by status
# ---------------------------------------------------------------------
def status_summary(
    milestones: Iterable[Milestone],
    out_path: str | os.PathLike = _IMG_DIR / "milestone_status.png",
) -> Path:
    """
    Generate a bar chart of how many milestones are in each status.

    Statuses with no milestones are drawn as zero-height bars so charts
    for different buildings line up.

    Parameters
    ----------
    milestones : iterable of Milestone
        Usually one building's sequence, but any collection works.
    out_path : str or Path, default='images/milestone_status.png'
        Where to save the PNG.

    Returns
    -------
    pathlib.Path
        Final image path for convenience.
    """
    counts = Counter(ms.status for ms in milestones)
    xs = list(MilestoneStatus)
    ys = [counts.get(s, 0) for s in xs]

    plt.figure()
    bars = plt.bar([s.name for s in xs], ys,
                   color=[STATUS_COLOURS[s] for s in xs], edgecolor="#333")
    for rect, cnt in zip(bars, ys):
        plt.text(rect.get_x() + rect.get_width() / 2,
                 cnt + 0.05,
                 str(cnt),
                 ha="center", va="bottom",
                 fontsize=8, color="#333")
    plt.grid(axis="y", linestyle=":", alpha=0.3)
    plt.title("Milestone Status")
    plt.ylabel("Milestones")
    plt.tight_layout()
    return _save(out_path)


# ---------------------------------------------------------------------
# Plot 2: horizontal timeline of one building's milestones
# ---------------------------------------------------------------------
def plot_timeline(
    milestones: Iterable[Milestone],
    today: Optional[date] = None,
    out_path: str | os.PathLike = _IMG_DIR / "rtm_timeline.png",
) -> Path:
    """
    Draw each milestone as a row, with a marker on its completion date or,
    failing that, its calculated deadline.  Rows without any date are
    listed but left empty.  A dashed line marks *today*.
    """
    ordered = sorted(milestones, key=lambda m: m.milestone_order)
    today = today or date.today()

    fig, ax = plt.subplots(figsize=(8, 0.6 * max(len(ordered), 1) + 1.2))
    for row, ms in enumerate(ordered):
        when = ms.completed_date or ms.calculated_deadline
        if when is None:
            continue
        marker = "o" if ms.completed_date else "D"
        ax.plot([when], [row], marker, color=STATUS_COLOURS[ms.status], markersize=9)
        ax.annotate(when.isoformat(), (when, row), xytext=(6, 4),
                    textcoords="offset points", fontsize=7, color="#333")

    ax.axvline(today, linestyle="--", color="#555", linewidth=0.8)
    ax.set_yticks(range(len(ordered)))
    ax.set_yticklabels([ms.title for ms in ordered], fontsize=8)
    ax.invert_yaxis()
    ax.grid(axis="x", linestyle=":", alpha=0.3)
    ax.set_title("RTM Timeline")
    fig.autofmt_xdate()
    plt.tight_layout()
    return _save(out_path)


# ---------------------------------------------------------------------
# Plot 3: milestone dependency graph
# ---------------------------------------------------------------------
def plot_dependency_graph(
    graph: DependencyGraph = STATUTORY_GRAPH,
    out_path: str | os.PathLike = _IMG_DIR / "milestone_dependencies.png",
) -> Path:
    """
    Draw the parent → dependant milestone graph.

    Edge labels show the statutory offset in days; enablement-only edges
    are dashed and unlabelled.
    """
    plt.figure(figsize=(7, 5))
    pos = nx.circular_layout(graph.g)

    nx.draw_networkx_nodes(graph.g, pos, node_color="#8d99ae", node_size=900)
    nx.draw_networkx_labels(graph.g, pos,
                            labels={n: str(n).replace("_", "\n") for n in graph.g.nodes()},
                            font_size=6, font_color="white")

    dated = [(u, v) for u, v, d in graph.g.edges(data=True) if d.get("offset_days") is not None]
    enabling = [(u, v) for u, v, d in graph.g.edges(data=True) if d.get("offset_days") is None]
    nx.draw_networkx_edges(graph.g, pos, edgelist=dated, arrowstyle="->", arrowsize=15)
    nx.draw_networkx_edges(graph.g, pos, edgelist=enabling, arrowstyle="->", arrowsize=15, style="dashed")
    nx.draw_networkx_edge_labels(graph.g, pos,
                                 edge_labels={(u, v): f"+{graph.offset(u, v)}d" for u, v in dated},
                                 font_size=7)

    plt.title("Milestone Dependencies")
    plt.axis("off")
    plt.tight_layout()
    return _save(out_path)


# ---------------------------------------------------------------------
# CLI demo:  python -m leasekeeper.viz  [--claim-date 2024-01-15]
# ---------------------------------------------------------------------
if __name__ == "__main__":
    import argparse

    from .store import InMemoryRepository
    from .timeline import TimelineService

    parser = argparse.ArgumentParser(
        description="Generate milestone_status.png, rtm_timeline.png and milestone_dependencies.png for a demo building.")
    parser.add_argument("--claim-date", default="2024-01-15",
                        help="Date the demo claim notice was served (YYYY-MM-DD)")
    args = parser.parse_args()

    try:
        served = date.fromisoformat(args.claim_date)
    except ValueError:
        raise SystemExit(f"⛔ invalid claim date: {args.claim_date}")

    svc = TimelineService(InMemoryRepository())
    svc.initialize("demo-building", "demo-user")
    for ms in svc.get_milestones("demo-building").data[:3]:
        svc.complete_milestone(ms.id, served)

    milestones = svc.get_milestones("demo-building").data
    for out in (status_summary(milestones), plot_timeline(milestones), plot_dependency_graph()):
        print(f"saved {out}")
