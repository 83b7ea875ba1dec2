"""Event specification primitives and registry typing.

Defines lightweight dataclasses to describe how to decode events:
- `FieldSpec`: one payload field (name, kind, optional selector table)
- `EventSpec`: one event rule (canonical key, record type, ordered layout)
- `EventRegistry`: mapping from canonical key → EventSpec
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import fields as dataclass_fields
from typing import Any, Literal

from satind.core.models import EventRecord
from satind.decoding.selectors import SelectorTable
from satind.decoding.words import normalize_word

FieldKind = Literal[
    "felt",
    "address",
    "i64",
    "bool",
    "u128",
    "enum",
    "skip",
    "address_array",
    "felt_array",
]

# words covered by each fixed-width kind; arrays are resolved by the cursor
FIXED_WIDTHS: dict[str, int] = {
    "felt": 1,
    "address": 1,
    "i64": 1,
    "bool": 1,
    "u128": 2,
    "enum": 1,
    "skip": 1,
}
ARRAY_KINDS = frozenset({"address_array", "felt_array"})


@dataclass(frozen=True)
class FieldSpec:
    """Describe one payload field in declaration order."""

    name: str
    kind: FieldKind
    table: SelectorTable[Any] | None = None

    @property
    def width(self) -> int | None:
        """Fixed word width, or None for variable-length arrays."""
        if self.kind in ARRAY_KINDS:
            return None
        return FIXED_WIDTHS[self.kind]

    @property
    def projected(self) -> bool:
        return self.kind != "skip"


@dataclass(frozen=True)
class EventSpec:
    """One event decoding rule: canonical key, target record and field layout."""

    key: str
    name: str
    table: str  # destination table name used by sinks
    record_type: type[EventRecord]
    fields: tuple[FieldSpec, ...]

    def __post_init__(self) -> None:
        norm = normalize_word(self.key)
        if norm is None:
            raise ValueError(f"{self.name}: invalid event key {self.key!r}")
        object.__setattr__(self, "key", norm)

        seen: set[str] = set()
        record_fields = {f.name for f in dataclass_fields(self.record_type)}
        for fs in self.fields:
            if fs.kind not in FIXED_WIDTHS and fs.kind not in ARRAY_KINDS:
                raise ValueError(f"{self.name}.{fs.name}: unknown field kind {fs.kind!r}")
            if fs.name in seen:
                raise ValueError(f"{self.name}: duplicate field {fs.name!r}")
            seen.add(fs.name)
            if fs.kind == "enum" and fs.table is None:
                raise ValueError(f"{self.name}.{fs.name}: enum field needs a selector table")
            if fs.projected and fs.name not in record_fields:
                raise ValueError(
                    f"{self.name}.{fs.name} is not a field of {self.record_type.__name__}"
                )

    @property
    def projected_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(fs for fs in self.fields if fs.projected)

    @property
    def fixed_word_count(self) -> int:
        """Words consumed when every array is empty (length words included)."""
        return sum(fs.width if fs.width is not None else 1 for fs in self.fields)


# The full registry keyed by canonical event key (64 lowercase hex, no 0x).
EventRegistry = dict[str, EventSpec]


def get_event_specs_keys(event_specs: Iterable[EventSpec]) -> list[str]:
    return [event_spec.key for event_spec in event_specs]


def get_event_registry_keys(registry: EventRegistry) -> list[str]:
    return get_event_specs_keys(registry.values())
