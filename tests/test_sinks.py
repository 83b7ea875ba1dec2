import asyncio
import threading
import time
from pathlib import Path

import pyarrow.parquet as pq
import pytest

from payloads import order_event, order_words, w
from satind.core.errors import RecordSinkError
from satind.decoding.decoder import decode_event
from satind.decoding.registries import make_order_registry
from satind.events import ORDER_CREATED
from satind.events.markets import MARKET_CREATED, MarketCreated
from satind.storage.duckdb_sink import DuckDBRecordSink, create_table_sql
from satind.storage.parquet_sink import ParquetRecordSink
from satind.storage.queries import count_rows, fetch_orders
from satind.storage.rows import record_to_row, table_layout


def _order(registry, *, tx: str = "0xtx1", **kw):
    return decode_event(order_event(order_words(**kw), tx=tx), registry)


def test_order_row_has_23_columns(registry):
    rec = _order(registry, swap_path=(w(1), w(2)))
    row = record_to_row(rec, ORDER_CREATED)

    assert len(row) == len(table_layout(ORDER_CREATED).columns) == 23
    assert row["order_type"] == "MarketIncrease"
    assert row["swap_path"] == f"0x{w(1)},0x{w(2)}"
    assert row["size_delta_usd"] == 2**64


def test_unique_constraint_only_when_key_present():
    assert "UNIQUE" in create_table_sql(table_layout(ORDER_CREATED))
    assert "UNIQUE" not in create_table_sql(table_layout(MARKET_CREATED))


@pytest.mark.asyncio
async def test_duckdb_round_trip(registry):
    sink = DuckDBRecordSink(":memory:", make_order_registry())
    await sink.insert(_order(registry))

    row = sink.connection.execute(
        "SELECT order_type, size_delta_usd, swap_path, is_long, time_stamp FROM orders"
    ).fetchone()
    assert row == ("MarketIncrease", 2**64, "", True, "1700000000")
    assert count_rows(sink.connection, "orders") == 1

    df = fetch_orders(sink.connection, account="0xa11ce")
    assert len(df) == 1
    assert df["size_delta_usd"].tolist() == [str(2**64)]
    assert df["acceptable_price"].tolist() == ["1900"]
    assert fetch_orders(sink.connection, account="0xb0b").empty
    sink.close()


@pytest.mark.asyncio
async def test_duckdb_duplicate_is_a_sink_error(registry):
    sink = DuckDBRecordSink(":memory:", make_order_registry())
    rec = _order(registry)
    await sink.insert(rec)
    with pytest.raises(RecordSinkError):
        await sink.insert(rec)
    await sink.insert(_order(registry, tx="0xtx2"))
    assert count_rows(sink.connection, "orders") == 2
    sink.close()


@pytest.mark.asyncio
async def test_duckdb_rejects_unregistered_record():
    sink = DuckDBRecordSink(":memory:", make_order_registry())
    with pytest.raises(RecordSinkError):
        await sink.insert(MarketCreated(block_number=1, transaction_hash="0xm"))
    sink.close()


@pytest.mark.asyncio
async def test_parquet_shards(tmp_path: Path, registry):
    sink = ParquetRecordSink(tmp_path, make_order_registry(), rows_per_shard=2)
    for i in range(3):
        await sink.insert(_order(registry, tx=f"0xtx{i}"))
    assert sink.buffered("orders") == 1
    sink.close()

    shards = sorted((tmp_path / "orders").glob("shard_*.parquet"))
    assert [p.name for p in shards] == ["shard_00000.parquet", "shard_00001.parquet"]
    table = pq.read_table(shards[0])
    assert table.num_rows == 2
    assert table.column("size_delta_usd").to_pylist() == [str(2**64)] * 2

    again = ParquetRecordSink(tmp_path, make_order_registry(), rows_per_shard=2)
    await again.insert(_order(registry, tx="0xtx9"))
    again.close()
    assert again.written == [tmp_path / "orders" / "shard_00002.parquet"]


@pytest.mark.asyncio
async def test_duckdb_transaction_rolls_back_a_failed_chunk(registry):
    sink = DuckDBRecordSink(":memory:", make_order_registry())
    with pytest.raises(RecordSinkError):
        async with sink.transaction() as writer:
            await writer.insert(_order(registry, tx="0xa"))
            await writer.insert(_order(registry, tx="0xb"))
            await writer.insert(_order(registry, tx="0xa"))
    assert count_rows(sink.connection, "orders") == 0

    async with sink.transaction() as writer:
        await writer.insert(_order(registry, tx="0xa"))
        await writer.insert(_order(registry, tx="0xb"))
    assert count_rows(sink.connection, "orders") == 2
    sink.close()


class SlowDuckDBSink(DuckDBRecordSink):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.started = threading.Event()
        self.finished = False

    def insert_sync(self, record):
        self.started.set()
        time.sleep(0.2)
        super().insert_sync(record)
        self.finished = True


@pytest.mark.asyncio
async def test_duckdb_cancelled_chunk_waits_for_worker_and_rolls_back(registry):
    sink = SlowDuckDBSink(":memory:", make_order_registry())

    async def write_chunk():
        async with sink.transaction() as writer:
            await writer.insert(_order(registry))

    task = asyncio.create_task(write_chunk())
    while not sink.started.is_set():
        await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert sink.finished
    assert count_rows(sink.connection, "orders") == 0
    sink.close()


@pytest.mark.asyncio
async def test_parquet_transaction_discards_a_failed_chunk(tmp_path: Path, registry):
    sink = ParquetRecordSink(tmp_path, make_order_registry(), rows_per_shard=10)
    with pytest.raises(RuntimeError):
        async with sink.transaction() as writer:
            await writer.insert(_order(registry, tx="0xa"))
            raise RuntimeError("fetch of the next page failed")
    assert sink.buffered("orders") == 0

    async with sink.transaction() as writer:
        await writer.insert(_order(registry, tx="0xa"))
        await writer.insert(_order(registry, tx="0xb"))
    assert sink.buffered("orders") == 2
    sink.close()
