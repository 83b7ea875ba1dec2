from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

from satind.core.errors import IngestError, RecordSinkError, UnknownEventKeyError
from satind.core.interfaces import IRecordWriter
from satind.core.models import RawEvent
from satind.decoding.decoder import decode_event
from satind.decoding.specs import EventRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class IngestStats:
    """
    Outcome counters for one ingestion pass.

    Unknown event keys are tracked apart from decoded records so callers can
    decide whether to skip, log or alert on them.
    """

    seen: int = 0
    decoded: int = 0
    unknown: int = 0
    rows_by_event: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    unknown_keys: dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def merge(self, other: IngestStats) -> None:
        self.seen += other.seen
        self.decoded += other.decoded
        self.unknown += other.unknown
        for k, v in other.rows_by_event.items():
            self.rows_by_event[k] += v
        for k, v in other.unknown_keys.items():
            self.unknown_keys[k] += v


# ---------------------------------------------------------------------------
# Use case
# ---------------------------------------------------------------------------


async def ingest_events(
    events: Iterable[RawEvent],
    *,
    registry: EventRegistry,
    sink: IRecordWriter,
) -> IngestStats:
    """
    Decode every raw event and hand each record to ``sink``.

    - Unknown event keys are counted and logged, never fatal.
    - A sink failure aborts the pass with `IngestError`; nothing is retried.
    """
    stats = IngestStats()
    for raw in events:
        stats.seen += 1
        try:
            record = decode_event(raw, registry)
        except UnknownEventKeyError as e:
            stats.unknown += 1
            stats.unknown_keys[e.event_key] += 1
            logger.warning("skipping %s (block %d, tx %s)", e, raw.block_number, raw.transaction_hash)
            continue

        name = type(record).__name__
        try:
            await sink.insert(record)
        except RecordSinkError as e:
            raise IngestError(raw.transaction_hash, name, e) from e

        stats.decoded += 1
        stats.rows_by_event[name] += 1
    return stats
