"""Streaming orchestrator: fetch → decode → persist.

This module provides two layers:

1) `index_events(...)`:
   - Pure application-layer use case.
   - Depends ONLY on interfaces (IEventLogProvider, IManifestRepository,
     IRecordSink, IEventRegistryProvider).
   - Does NOT manage lifecycle (e.g., closing RPC or the sink).

2) `run_indexer(...)`:
   - Wires concrete implementations (StarknetRPC, LiveManifest, a record sink)
     from an `IndexerConfig` for CLI / script usage.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from satind.clients.rpc import StarknetRPC
from satind.core.config import IndexerConfig
from satind.core.errors import IngestError, RecordSinkError
from satind.core.interfaces import (
    IEventLogProvider,
    IEventRegistryProvider,
    IManifestRepository,
    IRecordSink,
)
from satind.core.models import ChunkRecord
from satind.core.use_cases.ingest import IngestStats, ingest_events
from satind.decoding.registries import make_protocol_registry
from satind.decoding.registry import EventRegistryProvider
from satind.decoding.specs import EventRegistry, get_event_registry_keys
from satind.orchestration.utils import iter_chunks, keys_fingerprint, load_done_coverage, subtract_iv
from satind.storage.duckdb_sink import DuckDBRecordSink
from satind.storage.manifest import LiveManifest
from satind.storage.parquet_sink import ParquetRecordSink

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Work seeds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WorkSeed:
    """Inclusive block interval to process."""

    start: int
    end: int

    def split(self) -> tuple[WorkSeed, WorkSeed]:
        mid = (self.start + self.end) // 2
        return WorkSeed(self.start, mid), WorkSeed(mid + 1, self.end)


def build_work_seeds(
    start: int,
    end: int,
    step: int,
    covered: list[tuple[int, int]],
) -> list[WorkSeed]:
    """Build the list of uncovered block intervals to process."""
    seeds: list[WorkSeed] = []
    for uncovered_start, uncovered_end in subtract_iv((start, end), covered):
        for a, b in iter_chunks(uncovered_start, uncovered_end, step):
            seeds.append(WorkSeed(start=a, end=b))
    return seeds


async def resolve_block_range(
    provider: IEventLogProvider,
    start_block: int | str,
    end_block: int | str,
) -> tuple[int, int]:
    """Resolve start and end blocks, handling 'earliest' / 'latest'."""
    if isinstance(start_block, str) and start_block.lower() in ("earliest", "genesis"):
        start = 0
    else:
        start = int(start_block)

    if isinstance(end_block, str) and end_block.lower() == "latest":
        end = await provider.latest_block()
    else:
        end = int(end_block)

    if start > end:
        raise ValueError("start_block must be <= end_block")
    return start, end


# ---------------------------------------------------------------------------
# Stats / context
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class IndexStats:
    """Aggregated counters for one indexing run."""

    executed_subranges: int = 0
    processed_ok: int = 0
    processed_failed: int = 0  # single-block ranges that still failed to fetch
    partially_covered_split: int = 0
    total_events: int = 0
    ingest: IngestStats = field(default_factory=IngestStats)


@dataclass(slots=True)
class _Context:
    provider: IEventLogProvider
    address: str
    keys: list[str]
    registry: EventRegistry
    sem: asyncio.Semaphore
    manifest: IManifestRepository
    sink: IRecordSink
    stats: IndexStats


def _record(a: int, b: int, status: str, *, error: str | None = None, events: int = 0,
            ingest: IngestStats | None = None) -> ChunkRecord:
    return ChunkRecord(
        from_block=a,
        to_block=b,
        status=status,  # type: ignore[arg-type]
        attempts=1 if status != "started" else 0,
        error=error,
        events=events,
        decoded=ingest.decoded if ingest else 0,
        unknown=ingest.unknown if ingest else 0,
        updated_at=time.time(),
    )


async def _process_interval(ctx: _Context, seed: WorkSeed) -> None:
    """Process one inclusive range; fetch failures split the range and retry."""
    stack: list[WorkSeed] = [seed]

    while stack:
        current = stack.pop()
        a, b = current.start, current.end
        await ctx.manifest.append(_record(a, b, "started"))

        try:
            async with ctx.sem:
                events = await ctx.provider.get_events(
                    address=ctx.address,
                    keys=ctx.keys,
                    from_block=a,
                    to_block=b,
                )
        except Exception as e:
            await ctx.manifest.append(_record(a, b, "failed", error=f"{type(e).__name__}: {e}"))
            if a < b:
                stack.extend(current.split())
                ctx.stats.partially_covered_split += 1
                logger.warning("fetch failed for [%d, %d], splitting: %s", a, b, e)
            else:
                ctx.stats.processed_failed += 1
                logger.error("fetch failed for block %d: %s", a, e)
            continue

        ctx.stats.executed_subranges += 1
        ctx.stats.total_events += len(events)

        try:
            async with ctx.sink.transaction() as writer:
                chunk_stats = await ingest_events(events, registry=ctx.registry, sink=writer)
        except (IngestError, RecordSinkError) as e:
            await ctx.manifest.append(_record(a, b, "failed", error=str(e), events=len(events)))
            raise

        ctx.stats.ingest.merge(chunk_stats)
        ctx.stats.processed_ok += 1
        await ctx.manifest.append(_record(a, b, "done", events=len(events), ingest=chunk_stats))


# ---------------------------------------------------------------------------
# 1) Pure application use case
# ---------------------------------------------------------------------------


async def index_events(
    *,
    address: str,
    keys: list[str],
    seeds: list[WorkSeed],
    concurrency: int,
    provider: IEventLogProvider,
    registry_provider: IEventRegistryProvider,
    manifest: IManifestRepository,
    sink: IRecordSink,
) -> IndexStats:
    """Fetch, decode and persist every seed interval concurrently.

    Each interval is written through one sink transaction. An `IngestError`
    from any interval cancels the remaining work, waits for the cancelled
    intervals to roll back, and propagates to the caller.
    """
    stats = IndexStats()
    if not seeds:
        return stats

    ctx = _Context(
        provider=provider,
        address=address,
        keys=keys,
        registry=registry_provider.get_registry(),
        sem=asyncio.Semaphore(concurrency),
        manifest=manifest,
        sink=sink,
        stats=stats,
    )
    tasks = [asyncio.create_task(_process_interval(ctx, seed)) for seed in seeds]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for t in tasks:
            t.cancel()
        # let cancelled chunks roll back before the caller closes the sink
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return stats


# ---------------------------------------------------------------------------
# 2) Convenience wiring
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class IndexOutput:
    """High-level output of the orchestrator."""

    stats: IndexStats
    key_dir: Path
    manifest_path: Path


def make_provider(config: IndexerConfig) -> StarknetRPC:
    return StarknetRPC(
        config.rpc_url,
        timeout_s=config.timeout_s,
        max_connections=max(config.concurrency * 2, 8),
        chunk_size=config.chunk_size,
        fetch_timestamps=config.fetch_timestamps,
    )


def make_sink(config: IndexerConfig, registry: EventRegistry) -> IRecordSink:
    if config.sink == "parquet":
        return ParquetRecordSink(config.out_root / "shards", registry, rows_per_shard=config.rows_per_shard)
    return DuckDBRecordSink(config.db_path, registry)


async def run_indexer(
    config: IndexerConfig,
    *,
    registry: EventRegistry | None = None,
    provider: IEventLogProvider | None = None,
    sink: IRecordSink | None = None,
) -> IndexOutput:
    """Index ``config``'s block range with concrete adapters.

    Ranges already marked done in earlier manifests for the same
    (address, keys) pair are skipped.
    """
    registry = registry if registry is not None else make_protocol_registry()
    keys = config.event_keys or get_event_registry_keys(registry)

    key_dir = config.out_root / f"{config.address.lower()}__keys-{keys_fingerprint(keys)}"
    manifests_dir = key_dir / "manifests"
    run_id = f"run_{time.time_ns()}.jsonl"
    manifest = LiveManifest(manifests_dir / run_id)

    own_provider = provider is None
    rpc: IEventLogProvider = provider or make_provider(config)
    own_sink = sink is None
    out_sink = sink or make_sink(config, registry)

    try:
        start, end = await resolve_block_range(rpc, config.start_block, config.end_block)
        covered = load_done_coverage(manifests_dir, exclude_basename=run_id)
        seeds = build_work_seeds(start, end, config.step, covered)
        logger.info("indexing [%d, %d]: %d chunks to run", start, end, len(seeds))

        stats = await index_events(
            address=config.address,
            keys=keys,
            seeds=seeds,
            concurrency=config.concurrency,
            provider=rpc,
            registry_provider=EventRegistryProvider(registry),
            manifest=manifest,
            sink=out_sink,
        )
    finally:
        if own_sink:
            out_sink.close()
        if own_provider and isinstance(rpc, StarknetRPC):
            await rpc.aclose()

    return IndexOutput(stats=stats, key_dir=key_dir, manifest_path=manifest.path)
