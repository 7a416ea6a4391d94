"""
leasekeeper
===========

A toolkit for running a UK Right to Manage (RTM) claim: the five-step
milestone sequence, statutory deadlines, evidence of service, and
fill-in-the-blanks legal notices.

Import structure
----------------
`import leasekeeper` is intentionally cheap: no sub-module is imported
by default.  The database layer (*sqlmodel*), the dependency graph
(*networkx*) and the plotting helpers (*matplotlib*) are only loaded when
you import the sub-module that needs them.

Sub-modules
~~~~~~~~~~~
- :pymod:`leasekeeper.models`            – milestone, evidence, progress and template records
- :pymod:`leasekeeper.deadlines`         – statutory date arithmetic and the deadline calculator
- :pymod:`leasekeeper.lifecycle`         – milestone status state machine (`advance_status`)
- :pymod:`leasekeeper.dependencies`      – milestone dependency graph (NetworkX)
- :pymod:`leasekeeper.progress`          – overall phase and progress aggregation
- :pymod:`leasekeeper.timeline`          – ``TimelineService``
- :pymod:`leasekeeper.evidence`          – ``EvidenceService``
- :pymod:`leasekeeper.templates`         – placeholder rendering and validation
- :pymod:`leasekeeper.template_library`  – built-in legal templates
- :pymod:`leasekeeper.eligibility`       – quick RTM qualification check
- :pymod:`leasekeeper.store`             – in-memory repository
- :pymod:`leasekeeper.store_db`          – SQLite repository
- :pymod:`leasekeeper.blobs`             – evidence file storage
- :pymod:`leasekeeper.viz`               – plotting helpers

Quick start
-----------
>>> from datetime import date
>>> from leasekeeper.store import InMemoryRepository
>>> from leasekeeper.timeline import TimelineService
>>> svc = TimelineService(InMemoryRepository())
>>> svc.initialize("harbour-house", "alice").data
{'created': True}
>>> claim = svc.get_milestones("harbour-house").data[2]
>>> svc.complete_milestone(claim.id, date(2024, 1, 15)).success
True
"""

__all__ = [
    "models",
    "deadlines",
    "lifecycle",
    "dependencies",
    "progress",
    "timeline",
    "evidence",
    "templates",
    "template_library",
    "eligibility",
    "store",
    "store_db",
    "blobs",
    "viz",
]

__version__ = "0.1.0"
