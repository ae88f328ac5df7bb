# suture/errors.py
from __future__ import annotations


class SutureError(Exception):
    """Base class for suture failures."""


class InvalidRecordError(SutureError, ValueError):
    """A record reached the planner without a usable start/end instant."""

    def __init__(self, record_id: str, reason: str) -> None:
        super().__init__(f"record {record_id!r}: {reason}")
        self.record_id = record_id
        self.reason = reason


class StoreError(SutureError):
    """A read/update/delete against the backing record store failed."""
