"""
leasekeeper.dependencies
========================

Milestone → dependent-milestone graph built on NetworkX.

An edge ``parent → child`` says that finishing *parent* affects *child*.
Edges carrying ``offset_days`` are statutory date dependencies: the
child's deadline is the parent's completion date plus the offset.  Edges
with ``offset_days=None`` only record that the parent unlocks the child.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import networkx as nx

from .deadlines import ACQUISITION_DAYS, COUNTER_NOTICE_DAYS
from .models import MilestoneType


class DependencyGraph:
    """
    Lightweight wrapper around a DiGraph of milestone types.

    Example
    -------
    >>> g = DependencyGraph()
    >>> g.link(MilestoneType.CLAIM_NOTICE_SERVED, MilestoneType.COUNTER_NOTICE_PERIOD, 30)
    >>> g.dated_dependents(MilestoneType.CLAIM_NOTICE_SERVED)
    [(<MilestoneType.COUNTER_NOTICE_PERIOD: 'counter_notice_period'>, 30)]
    """

    def __init__(self) -> None:
        self.g = nx.DiGraph()
        self.g.add_nodes_from(MilestoneType)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def link(self, parent: MilestoneType, child: MilestoneType, offset_days: Optional[int] = None) -> None:
        """
        Add an edge parent → child.

        If the edge already exists its offset is overwritten.  An edge that
        would close a cycle is refused with :class:`ValueError`.
        """
        if parent == child or nx.has_path(self.g, child, parent):
            raise ValueError(f"{parent} → {child} would create a cycle")
        self.g.add_edge(parent, child, offset_days=offset_days)

    def dependents(self, parent: MilestoneType) -> List[MilestoneType]:
        """Direct dependants of *parent*, dated or not."""
        return sorted(self.g.successors(parent), key=_order)

    def offset(self, parent: MilestoneType, child: MilestoneType) -> Optional[int]:
        """Return the stored offset or raise KeyError if the edge is missing."""
        return self.g.edges[parent, child]["offset_days"]

    def dated_dependents(self, parent: MilestoneType) -> List[Tuple[MilestoneType, int]]:
        """Dependants whose deadline is derived from *parent*'s completion date."""
        return [
            (child, self.offset(parent, child))
            for child in self.dependents(parent)
            if self.offset(parent, child) is not None
        ]

    def to_json(self) -> Dict[str, Any]:
        """Nodes and links arrays, for the front-end graph widget."""
        return {
            "nodes": [{"id": str(n)} for n in sorted(self.g.nodes(), key=_order)],
            "links": [
                {"source": str(src), "target": str(dst), "offset_days": data.get("offset_days")}
                for src, dst, data in self.g.edges(data=True)
            ],
        }


_SEQUENCE = list(MilestoneType)


def _order(mt: MilestoneType) -> int:
    return _SEQUENCE.index(mt)


def statutory_graph(
    counter_notice_days: int = COUNTER_NOTICE_DAYS,
    acquisition_days: int = ACQUISITION_DAYS,
) -> DependencyGraph:
    """The RTM dependency graph with the given statutory offsets."""
    graph = DependencyGraph()
    graph.link(MilestoneType.COMPANY_FORMATION, MilestoneType.CLAIM_NOTICE_SERVED)
    graph.link(MilestoneType.CLAIM_NOTICE_SERVED, MilestoneType.COUNTER_NOTICE_PERIOD, counter_notice_days)
    graph.link(MilestoneType.CLAIM_NOTICE_SERVED, MilestoneType.ACQUISITION_COMPLETE, acquisition_days)
    return graph


STATUTORY_GRAPH = statutory_graph()
