"""Block-range coverage helpers for resumable indexing.

Every interval here is a ``(first, last)`` pair, inclusive on both ends.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

Interval = tuple[int, int]


def keys_fingerprint(keys: list[str]) -> str:
    """Short, order-insensitive tag for a set of event keys ("all" when empty)."""
    uniq = sorted({(k or "").lower().removeprefix("0x").lstrip("0") for k in keys if k})
    return "x".join(x[:10] for x in uniq) if uniq else "all"


def iter_chunks(first: int, last: int, step: int) -> Iterator[Interval]:
    """Cut ``[first, last]`` into consecutive chunks of at most ``step`` blocks."""
    for lo in range(first, last + 1, step):
        yield lo, min(last, lo + step - 1)


def merge_intervals(intervals: list[Interval]) -> list[Interval]:
    """Sort and coalesce overlapping or touching intervals."""
    merged: list[Interval] = []
    for lo, hi in sorted(intervals):
        if merged and lo <= merged[-1][1] + 1:
            prev_lo, prev_hi = merged[-1]
            merged[-1] = (prev_lo, max(prev_hi, hi))
        else:
            merged.append((lo, hi))
    return merged


def subtract_iv(iv: Interval, covered: list[Interval]) -> list[Interval]:
    """Parts of ``iv`` not covered by ``covered`` (sorted and merged)."""
    first, last = iv
    gaps: list[Interval] = []
    nxt = first
    for lo, hi in covered:
        if nxt > last or lo > last:
            break
        if hi < nxt:
            continue
        if lo > nxt:
            gaps.append((nxt, lo - 1))
        nxt = hi + 1
    if nxt <= last:
        gaps.append((nxt, last))
    return gaps


def load_done_coverage(manifests_dir: Path, exclude_basename: str | None = None) -> list[Interval]:
    """Merged block ranges recorded as ``done`` across every manifest in a directory.

    ``exclude_basename`` skips the live manifest of the current run. Corrupt
    lines are skipped with a warning.
    """
    if not manifests_dir.is_dir():
        return []
    done: list[Interval] = []
    for name in sorted(os.listdir(manifests_dir)):
        if not name.endswith(".jsonl") or name == exclude_basename:
            continue
        path = manifests_dir / name
        with open(path) as f:
            for lineno, line in enumerate(f, 1):
                if not line.strip():
                    continue
                try:
                    rec = json.loads(line)
                except json.JSONDecodeError:
                    logger.warning("ignoring corrupt manifest line %s:%d", path, lineno)
                    continue
                if rec.get("status") == "done":
                    done.append((int(rec["from_block"]), int(rec["to_block"])))
    return merge_intervals(done)
