"""JSONL raw-event reader (one event object per line).

Each line carries ``event_key``, ``block_number``, ``transaction_hash``, an
optional ``timestamp`` and ``data`` given either as a list of words or as the
flat comma-separated payload string.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from pydantic import BaseModel, ValidationError

from satind.core.errors import SatindError
from satind.core.models import RawEvent
from satind.decoding.words import normalize_word, split_words


class RawEventIn(BaseModel):
    event_key: str
    block_number: int
    transaction_hash: str
    data: str | list[str]
    timestamp: str | None = None
    from_address: str | None = None

    def to_raw_event(self) -> RawEvent:
        words = split_words(self.data) if isinstance(self.data, str) else self.data
        return RawEvent(
            event_key=normalize_word(self.event_key) or self.event_key.lower(),
            block_number=self.block_number,
            transaction_hash=self.transaction_hash.lower(),
            data=tuple(normalize_word(w) or w for w in words),
            timestamp=self.timestamp,
            from_address=normalize_word(self.from_address) if self.from_address else None,
        )


def iter_raw_events(path: Path) -> Iterator[RawEvent]:
    """Yield raw events from a JSONL file; a malformed line raises SatindError."""
    with open(path) as f:
        for lineno, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                yield RawEventIn.model_validate_json(line).to_raw_event()
            except ValidationError as e:
                raise SatindError(f"{path}:{lineno}: invalid raw event: {e}") from e
