"""Orchestration for streaming events with resumability.

This package provides:
- Main orchestrator (run_indexer / index_events) for fetching, decoding and persisting
- Interval utilities for coverage tracking and resumability
"""

from satind.orchestration.orchestrator import index_events, run_indexer
from satind.orchestration.utils import (
    iter_chunks,
    load_done_coverage,
    merge_intervals,
    subtract_iv,
)

__all__ = [
    "index_events",
    "run_indexer",
    "iter_chunks",
    "load_done_coverage",
    "merge_intervals",
    "subtract_iv",
]
