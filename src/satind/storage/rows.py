"""Flatten typed records into sink rows.

Every table shares the base columns (block_number, time_stamp,
transaction_hash) followed by the spec's projected fields in declaration
order. Enums are stored by variant name, arrays as comma-joined strings.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import pyarrow as pa

from satind.core.models import EventRecord
from satind.decoding.specs import ARRAY_KINDS, EventSpec

BASE_COLUMNS: tuple[tuple[str, str], ...] = (
    ("block_number", "BIGINT"),
    ("time_stamp", "VARCHAR"),
    ("transaction_hash", "VARCHAR"),
)

_SQL_TYPES = {
    "felt": "VARCHAR",
    "address": "VARCHAR",
    "i64": "BIGINT",
    "bool": "BOOLEAN",
    "u128": "UHUGEINT",
    "enum": "VARCHAR",
    "address_array": "VARCHAR",
    "felt_array": "VARCHAR",
}

# 128-bit values do not fit in int64 / decimal128(38): keep them as strings
_ARROW_TYPES: dict[str, pa.DataType] = {
    "BIGINT": pa.int64(),
    "BOOLEAN": pa.bool_(),
    "VARCHAR": pa.string(),
    "UHUGEINT": pa.string(),
}


@dataclass(frozen=True)
class TableLayout:
    """Column names and SQL types for one event table."""

    table: str
    columns: tuple[tuple[str, str], ...]

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.columns]

    def arrow_schema(self) -> pa.Schema:
        return pa.schema([pa.field(name, _ARROW_TYPES[sql]) for name, sql in self.columns])


def table_layout(spec: EventSpec) -> TableLayout:
    cols = list(BASE_COLUMNS)
    cols.extend((fs.name, _SQL_TYPES[fs.kind]) for fs in spec.projected_fields)
    return TableLayout(table=spec.table, columns=tuple(cols))


def _flatten(value: Any, kind: str) -> Any:
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if kind in ARRAY_KINDS:
        return ",".join(value)
    return value


def record_to_row(record: EventRecord, spec: EventSpec) -> dict[str, Any]:
    """Column dict for ``record`` following ``table_layout(spec)``."""
    row: dict[str, Any] = {
        "block_number": record.block_number,
        "time_stamp": record.timestamp,
        "transaction_hash": record.transaction_hash,
    }
    for fs in spec.projected_fields:
        row[fs.name] = _flatten(getattr(record, fs.name), fs.kind)
    return row


def specs_by_record_type(specs: Iterable[EventSpec]) -> dict[type[EventRecord], EventSpec]:
    return {spec.record_type: spec for spec in specs}
