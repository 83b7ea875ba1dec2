from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

SinkKind = Literal["duckdb", "parquet"]


@dataclass(frozen=True)
class IndexerConfig:
    """Configuration for the streaming indexer."""

    rpc_url: str
    address: str
    start_block: int | str
    end_block: int | str
    event_keys: list[str] = field(default_factory=list)  # empty → every registered key
    step: int = 1_000
    concurrency: int = 8
    chunk_size: int = 1_000  # events per starknet_getEvents page
    timeout_s: int = 20
    fetch_timestamps: bool = True  # resolve each event's block timestamp (one cached call per block)
    out_root: Path = Path("./data")
    db_path: Path = Path("./data/satind.duckdb")
    sink: SinkKind = "duckdb"
    rows_per_shard: int = 100_000

    def __post_init__(self) -> None:
        if self.step <= 0:
            raise ValueError("step must be > 0")
        if self.concurrency <= 0:
            raise ValueError("concurrency must be > 0")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if self.rows_per_shard <= 0:
            raise ValueError("rows_per_shard must be > 0")
