"""Core data models, configuration, and error types.

This package provides:
- Data models (RawEvent, EventRecord, ChunkRecord)
- Configuration (IndexerConfig)
- Error taxonomy (UnknownEventKeyError, RecordSinkError, IngestError)
"""

from satind.core.config import IndexerConfig
from satind.core.errors import IngestError, RecordSinkError, SatindError, UnknownEventKeyError
from satind.core.models import ChunkRecord, EventRecord, RawEvent

__all__ = [
    "IndexerConfig",
    "IngestError",
    "RecordSinkError",
    "SatindError",
    "UnknownEventKeyError",
    "ChunkRecord",
    "EventRecord",
    "RawEvent",
]
