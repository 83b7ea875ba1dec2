import asyncio
import os
from pathlib import Path

import duckdb

from satind.core.config import IndexerConfig
from satind.events import ORDER_CREATED_KEY
from satind.orchestration.orchestrator import run_indexer
from satind.storage.parquet_sink import TableShardsDir

EXAMPLES_ROOT = Path(__file__).parent
OUT_ROOT = EXAMPLES_ROOT.parent / "data_examples"

config = IndexerConfig(
    rpc_url=os.environ["SATIND_RPC_URL"],
    address=os.environ["SATIND_EVENT_EMITTER"],
    event_keys=[ORDER_CREATED_KEY],
    start_block=int(os.environ.get("SATIND_FROM_BLOCK", "0")),
    end_block="latest",
    out_root=OUT_ROOT,
    sink="parquet",
    step=5_000,
)


async def main():
    out = await run_indexer(config)
    print(out.stats)

    shards = TableShardsDir(config.out_root / "shards", "orders")
    con = duckdb.connect()
    q = f"""
    SELECT order_type, count(*) AS n, sum(CAST(size_delta_usd AS DOUBLE)) AS size_usd
    FROM read_parquet('{shards.shards_files_pattern()}')
    GROUP BY order_type
    ORDER BY n DESC
    """
    print(con.execute(q).df())


asyncio.run(main())
