"""
Pytest configuration: make sure `import leasekeeper` and `import api` work
regardless of where pytest is invoked, plus shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# /path/to/project/tests -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from leasekeeper.blobs import MemoryBlobStore  # noqa: E402
from leasekeeper.store import InMemoryRepository  # noqa: E402
from leasekeeper.timeline import TimelineService  # noqa: E402

BUILDING = "harbour-house"
USER = "alice"


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def blobs():
    return MemoryBlobStore()


@pytest.fixture
def timeline(repo):
    """Service with a freshly initialised building."""
    svc = TimelineService(repo)
    assert svc.initialize(BUILDING, USER).success
    return svc


@pytest.fixture
def milestones(timeline):
    """The building's milestones keyed by type."""
    return {m.milestone_type: m for m in timeline.get_milestones(BUILDING).data}
