"""Payload builders shared by the test modules."""

import asyncio
from contextlib import asynccontextmanager

from satind.core.models import EventRecord, RawEvent
from satind.events import ORDER_CREATED_KEY


def w(n: int) -> str:
    """One 64-char word encoding ``n``."""
    return f"{n:064x}"


ACCOUNT = w(0xA11CE)
RECEIVER = w(0xB0B)
CALLBACK = w(0)
UI_FEE = w(0xFEE)
MARKET = w(0x3A4E7)
COLLATERAL = w(0xC0FFEE)


def order_words(
    *,
    order_type: int = 2,
    swap_type: int = 0,
    swap_path: tuple[str, ...] = (),
    size_delta: tuple[int, int] = (1, 0),
    collateral_delta: tuple[int, int] = (0, 500),
    trigger_price: tuple[int, int] = (0, 0),
    acceptable_price: tuple[int, int] = (0, 1_900),
    execution_fee: tuple[int, int] = (0, 7),
    callback_gas_limit: tuple[int, int] = (0, 0),
    min_output_amount: tuple[int, int] = (0, 0),
    updated_at_block: int = 123,
    is_long: int = 1,
    is_frozen: int = 0,
) -> tuple[str, ...]:
    words = [
        w(0x0DE4),  # key
        w(0x0DE4),  # order struct key
        w(order_type),
        w(swap_type),
        ACCOUNT,
        RECEIVER,
        CALLBACK,
        UI_FEE,
        MARKET,
        COLLATERAL,
        w(len(swap_path)),
        *swap_path,
    ]
    for hi, lo in (
        size_delta,
        collateral_delta,
        trigger_price,
        acceptable_price,
        execution_fee,
        callback_gas_limit,
        min_output_amount,
    ):
        words += [w(hi), w(lo)]
    words += [w(updated_at_block), w(is_long), w(is_frozen)]
    return tuple(words)


def order_event(data: tuple[str, ...] | None = None, *, tx: str = "0xtx1", block: int = 10) -> RawEvent:
    return RawEvent(
        event_key=ORDER_CREATED_KEY,
        block_number=block,
        transaction_hash=tx,
        data=order_words() if data is None else data,
        timestamp="1700000000",
    )


class ListSink:
    """In-memory sink collecting inserted records."""

    def __init__(self) -> None:
        self.records: list[EventRecord] = []
        self.closed = False
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self):
        async with self._lock:
            mark = len(self.records)
            try:
                yield self
            except BaseException:
                del self.records[mark:]
                raise

    async def insert(self, record: EventRecord) -> None:
        self.records.append(record)

    def close(self) -> None:
        self.closed = True
