"""DuckDB record sink: one relational table per event type.

Tables are created on first use with ``CREATE TABLE IF NOT EXISTS``. Events
carrying a ``key`` field get a ``UNIQUE (transaction_hash, key)`` constraint,
so replaying the same event is reported as a sink-side conflict. The records
of one block chunk are written inside a single DuckDB transaction.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import duckdb

from satind.core.errors import RecordSinkError
from satind.core.interfaces import IRecordSink, IRecordWriter
from satind.core.models import EventRecord
from satind.decoding.specs import EventRegistry
from satind.storage.rows import TableLayout, record_to_row, specs_by_record_type, table_layout

logger = logging.getLogger(__name__)


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def create_table_sql(layout: TableLayout) -> str:
    cols = [f"{_quote(name)} {sql}" for name, sql in layout.columns]
    if "key" in layout.names:
        cols.append('UNIQUE ("transaction_hash", "key")')
    body = ",\n    ".join(cols)
    return f"CREATE TABLE IF NOT EXISTS {_quote(layout.table)} (\n    {body}\n)"


def insert_sql(layout: TableLayout) -> str:
    names = ", ".join(_quote(name) for name, _ in layout.columns)
    # 128-bit values travel as decimal strings and are cast server-side
    marks = ", ".join(
        "CAST(? AS UHUGEINT)" if sql == "UHUGEINT" else "?" for _, sql in layout.columns
    )
    return f"INSERT INTO {_quote(layout.table)} ({names}) VALUES ({marks})"


class DuckDBRecordSink(IRecordSink):
    """Persist decoded records into a DuckDB database.

    Parameters
    ----------
    path : str | Path
        Database file, or ``":memory:"``.
    registry : EventRegistry
        Specs of every event type this sink may receive.
    threads : int
        DuckDB worker threads.
    """

    def __init__(self, path: str | Path, registry: EventRegistry, *, threads: int = 4) -> None:
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._specs = specs_by_record_type(registry.values())
        self._layouts = {rt: table_layout(spec) for rt, spec in self._specs.items()}
        self._sql = {rt: insert_sql(layout) for rt, layout in self._layouts.items()}
        self._lock = asyncio.Lock()
        try:
            self._con = duckdb.connect(self.path)
            self._con.execute(f"PRAGMA threads={threads}")
            for layout in self._layouts.values():
                self._con.execute(create_table_sql(layout))
        except duckdb.Error as e:
            raise RecordSinkError(f"cannot open {self.path}: {e}") from e

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        return self._con

    def tables(self) -> list[str]:
        return sorted(layout.table for layout in self._layouts.values())

    def _params(self, layout: TableLayout, row: dict[str, Any]) -> list[Any]:
        out: list[Any] = []
        for name, sql in layout.columns:
            v = row[name]
            out.append(str(v) if sql == "UHUGEINT" and v is not None else v)
        return out

    def insert_sync(self, record: EventRecord) -> None:
        """Blocking insert (callers must serialize access)."""
        rt = type(record)
        spec = self._specs.get(rt)
        if spec is None:
            raise RecordSinkError(f"no table registered for {rt.__name__}")
        layout = self._layouts[rt]
        params = self._params(layout, record_to_row(record, spec))
        try:
            self._con.execute(self._sql[rt], params)
        except duckdb.Error as e:
            raise RecordSinkError(f"{layout.table}: {e}") from e
        logger.debug("inserted %s row (tx=%s)", layout.table, record.transaction_hash)

    def _execute(self, sql: str) -> None:
        try:
            self._con.execute(sql)
        except duckdb.Error as e:
            raise RecordSinkError(f"{sql}: {e}") from e

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking call in a worker thread.

        A cancelled caller still waits for the thread to finish, so the lock
        is never released while a statement is running on the connection.
        """
        fut = asyncio.ensure_future(asyncio.to_thread(fn, *args))
        try:
            return await asyncio.shield(fut)
        except asyncio.CancelledError:
            await asyncio.wait([fut])
            raise

    async def insert(self, record: EventRecord) -> None:
        async with self._lock:
            await self._run(self.insert_sync, record)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[IRecordWriter]:
        """Hold the connection for one chunk; commit on exit, roll back on error."""
        async with self._lock:
            await self._run(self._execute, "BEGIN TRANSACTION")
            try:
                yield _ChunkWriter(self)
            except BaseException:
                await self._run(self._execute, "ROLLBACK")
                raise
            await self._run(self._execute, "COMMIT")

    def close(self) -> None:
        self._con.close()


class _ChunkWriter:
    """Inserts issued inside an open `DuckDBRecordSink.transaction`."""

    def __init__(self, sink: DuckDBRecordSink) -> None:
        self._sink = sink

    async def insert(self, record: EventRecord) -> None:
        await self._sink._run(self._sink.insert_sync, record)
