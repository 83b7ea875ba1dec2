from __future__ import annotations

from .core.errors import IngestError, RecordSinkError, SatindError, UnknownEventKeyError
from .core.models import EventRecord, RawEvent
from .decoding.decoder import decode_event
from .decoding.registries import make_protocol_registry
from .decoding.registry import add_event_spec, add_many, make_registry
from .decoding.specs import EventRegistry, EventSpec, FieldSpec

__version__ = "0.1.0"

__all__ = [
    "decode_event",
    "make_protocol_registry",
    "make_registry",
    "add_event_spec",
    "add_many",
    "EventRegistry",
    "EventSpec",
    "FieldSpec",
    "EventRecord",
    "RawEvent",
    "IngestError",
    "RecordSinkError",
    "SatindError",
    "UnknownEventKeyError",
]
