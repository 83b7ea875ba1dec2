"""Error taxonomy for the ingestion pipeline.

Field-level decode failures never raise: they surface as ``None`` on the
record. Only the conditions below are reported to callers.
"""

from __future__ import annotations


class SatindError(Exception):
    """Base class for all errors raised by satind."""


class UnknownEventKeyError(SatindError, ValueError):
    """No decoder is registered for the raw event's key."""

    def __init__(self, event_key: str) -> None:
        super().__init__(f"unrecognized event type: {event_key}")
        self.event_key = event_key


class RecordSinkError(SatindError, RuntimeError):
    """A sink rejected a record (constraint violation, connectivity, ...)."""


class IngestError(SatindError, RuntimeError):
    """Pipeline-level failure while persisting a decoded record."""

    def __init__(self, transaction_hash: str, event: str, cause: Exception) -> None:
        super().__init__(f"failed to persist {event} from tx {transaction_hash}: {cause}")
        self.transaction_hash = transaction_hash
        self.event = event
