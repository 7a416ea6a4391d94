"""
leasekeeper.errors
==================

Exceptions raised inside the core.  Services translate :class:`StoreError`
into a failed :class:`~leasekeeper.models.OperationResult`; only the
template pre-check raises to its caller.
"""

from __future__ import annotations

from typing import List


class StoreError(Exception):
    """A record or blob store could not complete a read or write."""


class TemplateValidationError(ValueError):
    """Required template variables were neither supplied nor defaulted."""

    def __init__(self, template_id: str, missing: List[str]):
        self.template_id = template_id
        self.missing = list(missing)
        super().__init__(
            f"template {template_id!r} is missing required variables: {', '.join(self.missing)}"
        )
