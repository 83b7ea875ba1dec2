from __future__ import annotations

import asyncio
import os
from pathlib import Path

from satind.core.models import ChunkRecord


class LiveManifest:
    """JSONL journal of chunk records for one indexing run.

    Each record is appended as one line and fsynced before `append` returns,
    so a crashed run still leaves every completed chunk on disk.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch()
        self._lock = asyncio.Lock()

    async def append(self, rec: ChunkRecord) -> None:
        async with self._lock:
            await asyncio.to_thread(self._sync_append, rec.to_json_line())

    def _sync_append(self, line: str) -> None:
        with self.path.open("a") as f:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())
