"""Generic event decoder driven by declarative `EventSpec` layouts.

`decode_event` dispatches a `RawEvent` to its spec by exact key match and
materializes the spec's record type. Decoding is pure: the same raw event
always yields an equal record, and no field-level failure aborts the record.
"""

from __future__ import annotations

from typing import Any

from satind.core.errors import UnknownEventKeyError
from satind.core.models import EventRecord, RawEvent
from satind.decoding.cursor import FieldCursor, Slot
from satind.decoding.specs import EventRegistry, EventSpec, FieldSpec
from satind.decoding.words import (
    normalize_word,
    to_address,
    to_boolean,
    to_felt,
    to_integer_radix16,
    to_u128_decimal,
)

# ---------- field materialization ----------


def _decode_field(cursor: FieldCursor, slot: Slot, fs: FieldSpec) -> Any:
    """Apply the codec for ``fs.kind`` to the words under ``slot``."""
    if fs.kind == "address_array":
        return tuple(to_address(w) for w in cursor.read_elements(slot))
    if fs.kind == "felt_array":
        return tuple(to_felt(w) or w for w in cursor.read_elements(slot))

    words = cursor.read(slot)
    if fs.kind == "u128":
        return to_u128_decimal(words[0], words[1])

    word = words[0]
    if word is None:
        return None
    match fs.kind:
        case "felt":
            return to_felt(word)
        case "address":
            return to_address(word)
        case "i64":
            return to_integer_radix16(word)
        case "bool":
            return to_boolean(word)
        case "enum":
            assert fs.table is not None
            return fs.table.resolve(word)
    raise RuntimeError(f"unsupported field kind {fs.kind!r}")


def decode_values(words: tuple[str, ...], spec: EventSpec) -> dict[str, Any]:
    """Decode every projected field of ``spec`` from ``words``."""
    cursor = FieldCursor(words)
    values: dict[str, Any] = {}
    for fs in spec.fields:
        width = fs.width
        slot = cursor.array(fs.name) if width is None else cursor.fixed(fs.name, width)
        if fs.projected:
            values[fs.name] = _decode_field(cursor, slot, fs)
    return values


# ---------- main decoder ----------


def decode_with_spec(raw: RawEvent, spec: EventSpec) -> EventRecord:
    """Decode ``raw`` with an already resolved spec (never raises on bad words)."""
    values = decode_values(raw.data, spec)
    return spec.record_type(
        block_number=raw.block_number,
        transaction_hash=raw.transaction_hash,
        timestamp=raw.timestamp,
        **values,
    )


def lookup_spec(event_key: str, registry: EventRegistry) -> EventSpec | None:
    """Exact match of an event key against the registry.

    The key may be given in any hex form (``0x`` prefix, upper case, no zero
    padding); it is normalized to its 64-char word before lookup.
    """
    return registry.get(normalize_word(event_key) or event_key.lower())


def decode_event(raw: RawEvent, registry: EventRegistry) -> EventRecord:
    """Decode a raw event into its typed record.

    Raises `UnknownEventKeyError` when no spec is registered for the key.
    """
    spec = lookup_spec(raw.event_key, registry)
    if spec is None:
        raise UnknownEventKeyError(raw.event_key)
    return decode_with_spec(raw, spec)
