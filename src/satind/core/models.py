"""Core data models.

This module defines:
- `RawEvent`: one emitted event as fetched from the node, minimally normalized.
- `EventRecord`: base class of every typed record produced by the decoder.
- `ChunkRecord`: manifest entry used for resumability and coverage.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Literal

Status = Literal["started", "done", "failed"]


# === Inbound record ===


@dataclass(slots=True, frozen=True)
class RawEvent:
    """Raw emitted event: selector key plus an ordered sequence of felt words."""

    event_key: str  # 64 lowercase hex chars, no 0x
    block_number: int
    transaction_hash: str
    data: tuple[str, ...]
    timestamp: str | None = None
    from_address: str | None = None

    @classmethod
    def from_csv(
        cls,
        *,
        event_key: str,
        block_number: int,
        transaction_hash: str,
        data: str,
        timestamp: str | None = None,
        from_address: str | None = None,
    ) -> RawEvent:
        """Build from the flat comma-separated payload form."""
        return cls(
            event_key=event_key,
            block_number=block_number,
            transaction_hash=transaction_hash,
            data=tuple(w.strip() for w in data.split(",")) if data else (),
            timestamp=timestamp,
            from_address=from_address,
        )


# === Decoded records ===


@dataclass(slots=True, frozen=True, kw_only=True)
class EventRecord:
    """Fields shared by every decoded record."""

    block_number: int
    transaction_hash: str
    timestamp: str | None = None


# === Manifest record ===


@dataclass(slots=True)
class ChunkRecord:
    """A single chunk execution record persisted to the live manifest."""

    from_block: int
    to_block: int
    status: Status
    attempts: int
    error: str | None
    events: int  # raw events fetched
    decoded: int  # records persisted
    unknown: int  # events with no registered decoder
    updated_at: float

    def to_json_line(self) -> str:
        """Serialize as a compact JSON line."""
        return json.dumps(asdict(self), separators=(",", ":")) + "\n"
