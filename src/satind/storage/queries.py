"""
Read-side DuckDB helpers.

Each function takes an open connection and returns a pandas DataFrame ready
for downstream analysis.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import duckdb
import pandas as pd

from satind.decoding.words import to_address

FETCH_ORDERS_QUERY = """
SELECT block_number, transaction_hash, key, order_type, account, market,
       CAST(size_delta_usd AS VARCHAR) AS size_delta_usd,
       CAST(trigger_price AS VARCHAR) AS trigger_price,
       CAST(acceptable_price AS VARCHAR) AS acceptable_price,
       is_long, is_frozen
FROM orders
{where}
ORDER BY block_number, transaction_hash
LIMIT ?
"""


@contextmanager
def get_connection(path: str | Path, *, read_only: bool = True) -> Iterator[duckdb.DuckDBPyConnection]:
    """Context manager for a DuckDB connection on an indexer database."""
    con = duckdb.connect(str(path), read_only=read_only)
    try:
        yield con
    finally:
        con.close()


def fetch_orders(
    con: duckdb.DuckDBPyConnection,
    *,
    account: str | None = None,
    limit: int = 100,
) -> pd.DataFrame:
    """Fetch created orders, optionally restricted to one account.

    128-bit amounts come back as decimal strings: pandas has no unsigned
    128-bit dtype.
    """
    if account:
        sql = FETCH_ORDERS_QUERY.format(where="WHERE account = ?")
        return con.execute(sql, [to_address(account), limit]).df()
    return con.execute(FETCH_ORDERS_QUERY.format(where=""), [limit]).df()


def count_rows(con: duckdb.DuckDBPyConnection, table: str) -> int:
    """Row count of one event table."""
    row = con.execute(f'SELECT count(*) FROM "{table}"').fetchone()
    return int(row[0]) if row else 0
