"""Record sinks and run manifests.

This package provides:
- DuckDBRecordSink: relational sink, one table per event type
- ParquetRecordSink: columnar shards per event table
- LiveManifest: append-only journal of chunk status for resumability
"""

from satind.storage.duckdb_sink import DuckDBRecordSink
from satind.storage.manifest import LiveManifest
from satind.storage.parquet_sink import ParquetRecordSink

__all__ = [
    "DuckDBRecordSink",
    "LiveManifest",
    "ParquetRecordSink",
]
