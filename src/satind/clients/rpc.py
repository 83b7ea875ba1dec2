"""Lightweight JSON-RPC client for Starknet nodes.

This module provides:
- `StarknetRPC`: an async client with sane timeouts/connection limits
- `EmittedEvent`: validated shape of one `starknet_getEvents` entry

It returns `RawEvent` records ready for downstream decoding.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import BaseModel

from satind.core.models import RawEvent
from satind.decoding.words import normalize_word


class EmittedEvent(BaseModel):
    from_address: str
    keys: list[str]
    data: list[str]
    block_number: int | None = None  # absent for pending blocks
    block_hash: str | None = None
    transaction_hash: str

    def to_raw_event(self, timestamp: str | None = None) -> RawEvent:
        event_key = normalize_word(self.keys[0]) if self.keys else None
        return RawEvent(
            event_key=event_key or "",
            block_number=self.block_number if self.block_number is not None else -1,
            transaction_hash=self.transaction_hash.lower(),
            # malformed words are kept verbatim so the decoder can degrade per field
            data=tuple(normalize_word(w) or w for w in self.data),
            timestamp=timestamp,
            from_address=normalize_word(self.from_address),
        )


class EventsPage(BaseModel):
    events: list[EmittedEvent]
    continuation_token: str | None = None


def keys_param(keys: Sequence[str]) -> list[list[str]]:
    """Format event keys for the first key position of a getEvents filter."""
    if not keys:
        return []
    return [["0x" + (normalize_word(k) or k) for k in keys]]


class StarknetRPC:
    """Minimal async RPC client.

    Parameters
    ----------
    url : str
        RPC endpoint URL.
    timeout_s : int
        Per-operation timeout in seconds (connect/read/write).
    max_connections : int
        Maximum concurrent connections to keep in the pool.
    chunk_size : int
        Events requested per `starknet_getEvents` page.
    fetch_timestamps : bool
        Resolve each event's block timestamp (one cached call per block).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_s: int = 20,
        max_connections: int = 32,
        chunk_size: int = 1_000,
        fetch_timestamps: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.chunk_size = chunk_size
        self.fetch_timestamps = fetch_timestamps
        self._timestamps: dict[int, str] = {}
        self._next_id = 0
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=timeout_s,
                read=timeout_s,
                write=timeout_s,
                pool=max(30, timeout_s * 3),
            ),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max(1, max_connections // 2),
            ),
            http2=transport is None,
            transport=transport,
        )

    async def _call(self, method: str, params: Any) -> Any:
        self._next_id += 1
        payload = {"jsonrpc": "2.0", "id": self._next_id, "method": method, "params": params}
        r = await self.client.post(self.url, json=payload)
        r.raise_for_status()
        data = r.json()
        if "error" in data:
            e = data["error"]
            raise RuntimeError(f"RPC error: {e.get('code')} {e.get('message')}")
        return data["result"]

    async def latest_block(self) -> int:
        """Return the latest block number as an int."""
        return int(await self._call("starknet_blockNumber", []))

    async def block_timestamp(self, block_number: int) -> str:
        cached = self._timestamps.get(block_number)
        if cached is not None:
            return cached
        block = await self._call(
            "starknet_getBlockWithTxHashes",
            {"block_id": {"block_number": block_number}},
        )
        ts = str(block["timestamp"])
        self._timestamps[block_number] = ts
        return ts

    async def get_events(
        self,
        *,
        address: str,
        keys: list[str],
        from_block: int,
        to_block: int,
    ) -> list[RawEvent]:
        """Fetch every event emitted by ``address`` within a block range (all pages)."""
        base_filter: dict[str, Any] = {
            "from_block": {"block_number": from_block},
            "to_block": {"block_number": to_block},
            "address": address.lower(),
            "keys": keys_param(keys),
            "chunk_size": self.chunk_size,
        }
        out: list[RawEvent] = []
        token: str | None = None
        while True:
            flt = dict(base_filter)
            if token:
                flt["continuation_token"] = token
            page = EventsPage.model_validate(await self._call("starknet_getEvents", {"filter": flt}))
            for ev in page.events:
                ts = None
                if self.fetch_timestamps and ev.block_number is not None:
                    ts = await self.block_timestamp(ev.block_number)
                out.append(ev.to_raw_event(ts))
            token = page.continuation_token
            if not token:
                break
        return out

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
