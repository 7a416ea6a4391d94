"""
leasekeeper.events
==================

In-process change notifications.

Callers that used to poll for fresh state subscribe a listener instead;
the services publish ``(event_name, building_id)`` after each successful
mutation.
"""

from __future__ import annotations

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

Listener = Callable[[str, str], None]

INITIALIZED = "initialized"
MILESTONE_COMPLETED = "milestone_completed"
REFRESHED = "refreshed"
EVIDENCE_UPLOADED = "evidence_uploaded"
EVIDENCE_VERIFIED = "evidence_verified"


class EventBus:
    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def publish(self, event: str, building_id: str) -> None:
        """Call every listener; a failing listener is logged and skipped."""
        for listener in list(self._listeners):
            try:
                listener(event, building_id)
            except Exception:
                logger.exception(f"Listener {listener!r} failed on {event} for building {building_id}")

    def __len__(self) -> int:
        return len(self._listeners)
