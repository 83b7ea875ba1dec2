import asyncio
import logging
import time
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from satind.core.errors import SatindError

console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=False, show_path=False)],
    )


def _block_arg(value: str) -> int | str:
    return value if value.lower() in ("latest", "earliest", "genesis") else int(value)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="info",
    show_default=True,
)
def cli(log_level: str) -> None:
    """satind: decode and index protocol events from a Starknet node."""
    _setup_logging(log_level)


@cli.command("keys")
def keys_cmd() -> None:
    """List every registered event type and its canonical key."""
    from satind.decoding.registries import make_protocol_registry

    table = Table("event", "table", "key")
    for key, spec in sorted(make_protocol_registry().items(), key=lambda kv: kv[1].name):
        table.add_row(spec.name, spec.table, key)
    console.print(table)


@cli.command("index")
@click.option("--rpc", required=True, envvar="SATIND_RPC_URL", help="Starknet RPC endpoint URL")
@click.option("--address", required=True, help="Emitter contract address (event emitter / data store)")
@click.option("--key", "keys", multiple=True, help="Event key to fetch; repeat to OR (default: all registered)")
@click.option("--from-block", required=True, help="Start block (int or 'earliest')")
@click.option("--to-block", required=True, help="End block (int or 'latest')")
@click.option("--step", type=int, default=1_000, show_default=True, help="Blocks per chunk")
@click.option("--concurrency", type=int, default=8, show_default=True, help="Max parallel chunk fetches")
@click.option("--chunk-size", type=int, default=1_000, show_default=True, help="Events per RPC page")
@click.option("--out-root", type=click.Path(path_type=Path), default=Path("./data"), show_default=True)
@click.option("--db", "db_path", type=click.Path(path_type=Path), envvar="SATIND_DB",
              default=Path("./data/satind.duckdb"), show_default=True)
@click.option("--sink", type=click.Choice(["duckdb", "parquet"]), default="duckdb", show_default=True)
@click.option("--timestamps/--no-timestamps", default=True, show_default=True,
              help="Resolve block timestamps (one extra RPC call per block)")
def index_cmd(
    rpc: str,
    address: str,
    keys: tuple[str, ...],
    from_block: str,
    to_block: str,
    step: int,
    concurrency: int,
    chunk_size: int,
    out_root: Path,
    db_path: Path,
    sink: str,
    timestamps: bool,
) -> None:
    """Fetch, decode and persist events across a block range (resumable)."""
    from satind.core.config import IndexerConfig
    from satind.orchestration.orchestrator import run_indexer

    try:
        config = IndexerConfig(
            rpc_url=rpc,
            address=address,
            event_keys=list(keys),
            start_block=_block_arg(from_block),
            end_block=_block_arg(to_block),
            step=step,
            concurrency=concurrency,
            chunk_size=chunk_size,
            out_root=out_root,
            db_path=db_path,
            sink=sink,  # type: ignore[arg-type]
            fetch_timestamps=timestamps,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    t0 = time.time()
    try:
        out = asyncio.run(run_indexer(config))
    except (SatindError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    st = out.stats
    console.print(f"[bold]done[/]: {st.total_events} events • {time.time() - t0:.2f}s")
    console.print(
        f"[bold]summary[/]: "
        f"[green]decoded[/]={st.ingest.decoded}  "
        f"[yellow]unknown[/]={st.ingest.unknown}  "
        f"[red]failed_blocks[/]={st.processed_failed}  "
        f"(chunks={st.executed_subranges}, splits={st.partially_covered_split})"
    )
    console.print(f"manifest → {out.manifest_path}")


async def _ingest_file(events, registry, sink):
    from satind.core.use_cases.ingest import ingest_events

    async with sink.transaction() as writer:
        return await ingest_events(events, registry=registry, sink=writer)


@cli.command("decode")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--db", "db_path", type=click.Path(path_type=Path), default=None,
              help="Also persist decoded records into this DuckDB file")
def decode_cmd(path: Path, db_path: Path | None) -> None:
    """Decode raw events from a JSONL file and print the typed records."""
    from satind.clients.jsonl import iter_raw_events
    from satind.decoding.decoder import decode_event
    from satind.decoding.registries import make_protocol_registry
    from satind.storage.duckdb_sink import DuckDBRecordSink

    registry = make_protocol_registry()
    try:
        events = list(iter_raw_events(path))
    except SatindError as e:
        raise click.ClickException(str(e)) from e

    if db_path is not None:
        sink = DuckDBRecordSink(db_path, registry)
        try:
            stats = asyncio.run(_ingest_file(events, registry, sink))
        except SatindError as e:
            raise click.ClickException(str(e)) from e
        finally:
            sink.close()
        console.print(f"[green]decoded[/]={stats.decoded}  [yellow]unknown[/]={stats.unknown}")
        return

    unknown = 0
    for raw in events:
        try:
            console.print(decode_event(raw, registry))
        except SatindError as e:
            unknown += 1
            console.print(f"[yellow]{e}[/]")
    console.print(f"[green]decoded[/]={len(events) - unknown}  [yellow]unknown[/]={unknown}")


@cli.command("orders")
@click.option("--db", "db_path", type=click.Path(exists=True, path_type=Path), envvar="SATIND_DB", required=True)
@click.option("--account", default=None, help="Only orders created by this account")
@click.option("--limit", type=int, default=20, show_default=True)
def orders_cmd(db_path: Path, account: str | None, limit: int) -> None:
    """Show created orders stored in a DuckDB database."""
    from satind.storage.queries import fetch_orders, get_connection

    with get_connection(db_path) as con:
        df = fetch_orders(con, account=account, limit=limit)

    table = Table(*[str(c) for c in df.columns])
    for row in df.itertuples(index=False):
        table.add_row(*["" if v is None else str(v) for v in row])
    console.print(table)
    console.print(f"{len(df)} order(s)")


if __name__ == "__main__":
    cli()
