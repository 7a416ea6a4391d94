"""
api.deps
========

FastAPI dependency providers.

`get_repository` returns a single **DBRepository** so every request talks
to the persistent SQLite store; tests swap it for an
``InMemoryRepository`` through ``app.dependency_overrides``.  The services
are cheap wrappers and are built per request around whichever repository,
blob store and event bus are in effect.
"""

from functools import lru_cache

from fastapi import Depends

from leasekeeper.blobs import FileBlobStore
from leasekeeper.db import create_all
from leasekeeper.events import EventBus
from leasekeeper.evidence import EvidenceService
from leasekeeper.settings import Settings, settings
from leasekeeper.store_db import DBRepository
from leasekeeper.timeline import TimelineService


@lru_cache
def get_settings() -> Settings:
    """Return application settings."""
    return settings


@lru_cache
def get_repository() -> DBRepository:
    """Singleton DB-backed repository (persists across requests)."""
    create_all()
    return DBRepository()


@lru_cache
def get_blobs() -> FileBlobStore:
    """Evidence files under ``LEASEKEEPER_BLOB_ROOT``."""
    return FileBlobStore()


@lru_cache
def get_events() -> EventBus:
    """Process-wide event bus shared by both services."""
    return EventBus()


def get_timeline_service(
    repo=Depends(get_repository),
    cfg: Settings = Depends(get_settings),
    events: EventBus = Depends(get_events),
) -> TimelineService:
    return TimelineService(repo, settings=cfg, events=events)


def get_evidence_service(
    repo=Depends(get_repository),
    blobs=Depends(get_blobs),
    events: EventBus = Depends(get_events),
) -> EvidenceService:
    return EvidenceService(repo, blobs, events=events)
