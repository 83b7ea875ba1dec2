from __future__ import annotations

import asyncio
import glob
import logging
import os
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import pyarrow as pa
import pyarrow.parquet as pq

from satind.core.errors import RecordSinkError
from satind.core.interfaces import IRecordSink, IRecordWriter
from satind.core.models import EventRecord
from satind.decoding.specs import EventRegistry
from satind.storage.rows import TableLayout, record_to_row, specs_by_record_type, table_layout

logger = logging.getLogger(__name__)


class TableShardsDir:
    """Shard directory for one event table: ``out_root/<table>/shard_*.parquet``."""

    def __init__(self, out_root: Path, table: str) -> None:
        self.shards_dir = out_root / table
        self.shards_dir.mkdir(exist_ok=True, parents=True)

    def shards_files_pattern(self) -> str:
        return (self.shards_dir / "shard_*.parquet").as_posix()

    def list_shards(self) -> list[str]:
        return sorted(glob.glob(self.shards_files_pattern()))

    def shard_path(self, idx: int) -> Path:
        return self.shards_dir / f"shard_{idx:05d}.parquet"

    def next_index(self) -> int:
        existing = self.list_shards()
        if not existing:
            return 0
        last = os.path.basename(existing[-1])
        return int(last.split("_")[1].split(".")[0]) + 1


class ParquetRecordSink(IRecordSink):
    """
    Buffer decoded records per event table and write Parquet shards.

    - A shard is written as soon as a table buffer reaches `rows_per_shard`.
    - `close()` flushes every partial buffer.
    - New runs never rewrite existing shards; they continue the numbering.
    - Inside `transaction()` rows are staged and only reach the table
      buffers when the chunk completes.
    """

    def __init__(
        self,
        out_root: Path,
        registry: EventRegistry,
        *,
        rows_per_shard: int = 100_000,
        codec: str = "zstd",
    ) -> None:
        self.out_root = Path(out_root)
        self.rows_per_shard = rows_per_shard
        self.codec = codec
        self._specs = specs_by_record_type(registry.values())
        self._layouts = {rt: table_layout(spec) for rt, spec in self._specs.items()}
        self._buffers: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self._dirs: dict[str, TableShardsDir] = {}
        self._next_idx: dict[str, int] = {}
        self._lock = asyncio.Lock()
        self.written: list[Path] = []

    def _dir(self, table: str) -> TableShardsDir:
        d = self._dirs.get(table)
        if d is None:
            d = TableShardsDir(self.out_root, table)
            self._dirs[table] = d
            self._next_idx[table] = d.next_index()
        return d

    def _atomic_write(self, out_path: Path, table: pa.Table) -> Path:
        """Write Parquet atomically (tmp + replace)."""
        tmp = out_path.with_suffix(".tmp")
        pq.write_table(table, tmp, compression=self.codec)
        os.replace(tmp, out_path)
        logger.info("wrote %s (rows=%d)", out_path, len(table))
        return out_path

    def _flush(self, layout: TableLayout) -> Path | None:
        rows = self._buffers.pop(layout.table, [])
        if not rows:
            return None
        d = self._dir(layout.table)
        idx = self._next_idx[layout.table]
        try:
            table = pa.Table.from_pylist(rows, schema=layout.arrow_schema())
            out = self._atomic_write(d.shard_path(idx), table)
        except (OSError, pa.ArrowException) as e:
            raise RecordSinkError(f"{layout.table}: cannot write shard {idx}: {e}") from e
        self._next_idx[layout.table] = idx + 1
        self.written.append(out)
        return out

    def buffered(self, table: str) -> int:
        return len(self._buffers.get(table, ()))

    def _row(self, record: EventRecord) -> tuple[TableLayout, dict[str, Any]]:
        rt = type(record)
        spec = self._specs.get(rt)
        if spec is None:
            raise RecordSinkError(f"no table registered for {rt.__name__}")
        layout = self._layouts[rt]
        row = record_to_row(record, spec)
        for name, sql in layout.columns:
            if sql == "UHUGEINT" and row[name] is not None:
                row[name] = str(row[name])
        return layout, row

    async def _append(self, rows: list[tuple[TableLayout, dict[str, Any]]]) -> None:
        async with self._lock:
            for layout, row in rows:
                buf = self._buffers[layout.table]
                buf.append(row)
                if len(buf) >= self.rows_per_shard:
                    await asyncio.to_thread(self._flush, layout)

    async def insert(self, record: EventRecord) -> None:
        await self._append([self._row(record)])

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[IRecordWriter]:
        staged = _StagedRows(self)
        yield staged
        await self._append(staged.rows)

    def close(self) -> None:
        for layout in self._layouts.values():
            self._flush(layout)


class _StagedRows:
    """Rows of one chunk held back until `ParquetRecordSink.transaction` exits cleanly."""

    def __init__(self, sink: ParquetRecordSink) -> None:
        self._sink = sink
        self.rows: list[tuple[TableLayout, dict[str, Any]]] = []

    async def insert(self, record: EventRecord) -> None:
        self.rows.append(self._sink._row(record))
