"""Event decoding driven by declarative layouts.

This package provides:
- Word codec (felt words → ints, booleans, addresses, 128-bit values)
- Selector tables (selector word → enum variant)
- Field cursor (word offsets across variable-length arrays)
- Event specification system (EventSpec, FieldSpec) and registries
- Generic decoder that turns a RawEvent into its typed record
"""

from satind.decoding.cursor import FieldCursor, Slot, resolve_layout
from satind.decoding.decoder import decode_event, decode_with_spec, lookup_spec
from satind.decoding.registry import EventRegistryProvider, add_event_spec, add_many, make_registry
from satind.decoding.selectors import SelectorTable
from satind.decoding.specs import EventRegistry, EventSpec, FieldSpec

__all__ = [
    "EventRegistry",
    "EventRegistryProvider",
    "EventSpec",
    "FieldCursor",
    "FieldSpec",
    "SelectorTable",
    "Slot",
    "add_event_spec",
    "add_many",
    "decode_event",
    "decode_with_spec",
    "lookup_spec",
    "make_registry",
    "resolve_layout",
]
