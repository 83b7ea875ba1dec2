from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import List, Protocol, runtime_checkable

from satind.core.models import ChunkRecord, EventRecord, RawEvent
from satind.decoding.specs import EventRegistry


# ---------------------------------------------------------------------------
# IEventLogProvider
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventLogProvider(Protocol):
    """
    Abstract provider for fetching emitted events.

    Domain expectations:
    - It returns RawEvent objects with normalized 64-char words.
    - It hides the underlying RPC / archive technology.
    """

    async def get_events(
        self,
        *,
        address: str,
        keys: list[str],
        from_block: int,
        to_block: int,
    ) -> List[RawEvent]:
        """
        Return all events emitted by ``address`` whose first key is in ``keys``
        over the inclusive block range.
        """
        ...

    async def latest_block(self) -> int:
        """Return the current chain head height."""
        ...


# ---------------------------------------------------------------------------
# IRecordWriter / IRecordSink
# ---------------------------------------------------------------------------

@runtime_checkable
class IRecordWriter(Protocol):
    """Anything that accepts decoded records one at a time."""

    async def insert(self, record: EventRecord) -> None:
        ...


@runtime_checkable
class IRecordSink(IRecordWriter, Protocol):
    """
    Abstract sink for decoded records.

    Domain expectations:
    - One `insert` call per decoded record; the record is never mutated.
    - Failures raise RecordSinkError; the caller does not retry.
    - Idempotency (e.g. uniqueness on transaction hash + key) is the
      sink's concern.
    - `transaction()` groups the inserts of one block chunk: the records
      inserted through the yielded writer become visible together on a clean
      exit, and none does if the block raises or is cancelled.
    """

    def transaction(self) -> AbstractAsyncContextManager[IRecordWriter]:
        ...

    def close(self) -> None:
        """Flush and release resources."""
        ...


# ---------------------------------------------------------------------------
# IManifestRepository
# ---------------------------------------------------------------------------

@runtime_checkable
class IManifestRepository(Protocol):
    """
    Append-only manifest repository for chunk status tracking.

    Reading / aggregating coverage is an application-level responsibility.
    """

    async def append(self, record: ChunkRecord) -> None:
        """Append a new ChunkRecord (started/done/failed)."""
        ...


# ---------------------------------------------------------------------------
# IEventRegistryProvider
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventRegistryProvider(Protocol):
    """
    Abstract provider of EventRegistry objects used for decoding events.

    How this registry is built is an infrastructure concern.
    """

    def get_registry(self) -> EventRegistry:
        """Return a fully configured EventRegistry instance."""
        ...
