import json
from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from payloads import ListSink, order_event
from satind.core.config import IndexerConfig
from satind.core.errors import IngestError, RecordSinkError
from satind.decoding.registry import EventRegistryProvider
from satind.orchestration.orchestrator import (
    WorkSeed,
    build_work_seeds,
    index_events,
    make_provider,
    resolve_block_range,
    run_indexer,
)
from satind.orchestration.utils import (
    iter_chunks,
    keys_fingerprint,
    load_done_coverage,
    merge_intervals,
    subtract_iv,
)
from satind.storage.duckdb_sink import DuckDBRecordSink
from satind.storage.queries import count_rows


def test_interval_helpers():
    assert list(iter_chunks(0, 9, 4)) == [(0, 3), (4, 7), (8, 9)]
    assert merge_intervals([(5, 9), (0, 3), (4, 4), (20, 21)]) == [(0, 9), (20, 21)]
    assert subtract_iv((0, 20), [(3, 5), (10, 12)]) == [(0, 2), (6, 9), (13, 20)]
    assert subtract_iv((0, 5), [(0, 5)]) == []
    assert build_work_seeds(0, 9, 5, [(0, 4)]) == [WorkSeed(5, 9)]


def test_keys_fingerprint_is_order_insensitive():
    assert keys_fingerprint(["0x0AB", "0x0cd"]) == keys_fingerprint(["0xcd", "0xab"])
    assert keys_fingerprint([]) == "all"


def test_load_done_coverage(tmp_path):
    manifests = tmp_path / "manifests"
    manifests.mkdir()
    lines = [
        json.dumps({"from_block": 0, "to_block": 4, "status": "done"}),
        json.dumps({"from_block": 5, "to_block": 9, "status": "failed"}),
        "{not json",
        json.dumps({"from_block": 10, "to_block": 14, "status": "done"}),
    ]
    (manifests / "run_1.jsonl").write_text("\n".join(lines) + "\n")
    (manifests / "run_2.jsonl").write_text(json.dumps({"from_block": 5, "to_block": 9, "status": "done"}) + "\n")

    assert load_done_coverage(manifests) == [(0, 14)]
    assert load_done_coverage(manifests, exclude_basename="run_2.jsonl") == [(0, 4), (10, 14)]
    assert load_done_coverage(tmp_path / "missing") == []


@pytest.mark.asyncio
async def test_resolve_block_range(mock_provider):
    assert await resolve_block_range(mock_provider, "earliest", "latest") == (0, 100)
    assert await resolve_block_range(mock_provider, 5, 7) == (5, 7)
    with pytest.raises(ValueError):
        await resolve_block_range(mock_provider, 9, 3)


@pytest.mark.asyncio
async def test_index_events_persists_every_chunk(registry, mock_provider, mock_manifest, list_sink: ListSink):
    async def get_events(*, address, keys, from_block, to_block):
        return [order_event(tx=f"0x{from_block:x}", block=from_block)]

    mock_provider.get_events.side_effect = get_events
    stats = await index_events(
        address="0x1",
        keys=[],
        seeds=[WorkSeed(0, 4), WorkSeed(5, 9)],
        concurrency=2,
        provider=mock_provider,
        registry_provider=EventRegistryProvider(registry),
        manifest=mock_manifest,
        sink=list_sink,
    )

    assert stats.executed_subranges == 2
    assert stats.processed_ok == 2
    assert stats.total_events == 2
    assert stats.ingest.decoded == 2
    assert sorted(r.block_number for r in list_sink.records) == [0, 5]
    statuses = [c.args[0].status for c in mock_manifest.append.await_args_list]
    assert statuses.count("done") == 2


@pytest.mark.asyncio
async def test_fetch_failure_splits_range(registry, mock_provider, mock_manifest, list_sink: ListSink):
    async def get_events(*, address, keys, from_block, to_block):
        if from_block <= 3 <= to_block:
            raise TimeoutError("bad block")
        return []

    mock_provider.get_events.side_effect = get_events
    stats = await index_events(
        address="0x1",
        keys=[],
        seeds=[WorkSeed(0, 3)],
        concurrency=1,
        provider=mock_provider,
        registry_provider=EventRegistryProvider(registry),
        manifest=mock_manifest,
        sink=list_sink,
    )

    # [0,3] -> [2,3] -> [3,3] keeps failing; [0,1] and [2,2] succeed
    assert stats.partially_covered_split == 2
    assert stats.processed_ok == 2
    assert stats.processed_failed == 1


class RejectingSink(ListSink):
    async def insert(self, record):
        raise RecordSinkError("disk full")


@pytest.mark.asyncio
async def test_ingest_error_propagates(registry, mock_provider, mock_manifest):
    mock_provider.get_events.return_value = [order_event()]
    with pytest.raises(IngestError):
        await index_events(
            address="0x1",
            keys=[],
            seeds=[WorkSeed(0, 0)],
            concurrency=1,
            provider=mock_provider,
            registry_provider=EventRegistryProvider(registry),
            manifest=mock_manifest,
            sink=RejectingSink(),
        )
    statuses = [c.args[0].status for c in mock_manifest.append.await_args_list]
    assert statuses[-1] == "failed"
    # fetch was not retried
    assert mock_provider.get_events.await_count == 1


@pytest.mark.asyncio
async def test_run_indexer_resumes_from_manifests(tmp_path, registry):
    provider = AsyncMock()
    provider.get_events = AsyncMock(return_value=[])
    provider.latest_block = AsyncMock(return_value=9)
    sink = ListSink()
    config = IndexerConfig(
        rpc_url="http://unused",
        address="0xABC",
        start_block=0,
        end_block="latest",
        step=5,
        out_root=tmp_path,
    )

    out = await run_indexer(config, registry=registry, provider=provider, sink=sink)
    assert out.stats.executed_subranges == 2
    assert out.manifest_path.parent == out.key_dir / "manifests"
    assert out.key_dir.name.startswith("0xabc__keys-")
    assert not sink.closed

    again = await run_indexer(config, registry=registry, provider=provider, sink=sink)
    assert again.stats.executed_subranges == 0
    assert provider.get_events.await_count == 2


def test_config_rejects_bad_values():
    with pytest.raises(ValueError):
        IndexerConfig(rpc_url="x", address="0x1", start_block=0, end_block=1, step=0)


class FlakyDuckDBSink(DuckDBRecordSink):
    """Fails on the n-th insert until `fail_on` is cleared."""

    def __init__(self, *args, fail_on: int | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_on = fail_on
        self.calls = 0

    def insert_sync(self, record):
        self.calls += 1
        if self.fail_on is not None and self.calls == self.fail_on:
            raise RecordSinkError("connection lost")
        super().insert_sync(record)


@pytest.mark.asyncio
async def test_rerun_after_partial_chunk_failure(tmp_path, registry):
    chunk = [order_event(tx=f"0xtx{i}", block=i) for i in range(3)]
    provider = AsyncMock()
    provider.get_events = AsyncMock(return_value=chunk)
    provider.latest_block = AsyncMock(return_value=4)
    sink = FlakyDuckDBSink(tmp_path / "satind.duckdb", registry, fail_on=3)
    config = IndexerConfig(
        rpc_url="http://unused",
        address="0x1",
        start_block=0,
        end_block=4,
        step=5,
        out_root=tmp_path,
    )

    with pytest.raises(IngestError):
        await run_indexer(config, registry=registry, provider=provider, sink=sink)
    assert count_rows(sink.connection, "orders") == 0

    sink.fail_on = None
    out = await run_indexer(config, registry=registry, provider=provider, sink=sink)
    assert out.stats.processed_ok == 1
    assert out.stats.ingest.decoded == 3
    assert count_rows(sink.connection, "orders") == 3
    sink.close()


@pytest.mark.asyncio
async def test_provider_resolves_timestamps_by_default():
    config = IndexerConfig(rpc_url="http://node", address="0x1", start_block=0, end_block=1)
    rpc = make_provider(config)
    assert rpc.fetch_timestamps is True
    await rpc.aclose()

    rpc = make_provider(replace(config, fetch_timestamps=False))
    assert rpc.fetch_timestamps is False
    await rpc.aclose()
