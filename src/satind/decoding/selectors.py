"""Selector tables: canonical selector word → closed enum variant.

Tables are immutable module-level constants. Resolution is pure and total:
an unmapped or malformed selector resolves to ``None``.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Generic, TypeVar

from satind.decoding.words import normalize_word

E = TypeVar("E", bound=Enum)


class OrderType(str, Enum):
    MARKET_SWAP = "MarketSwap"
    LIMIT_SWAP = "LimitSwap"
    MARKET_INCREASE = "MarketIncrease"
    LIMIT_INCREASE = "LimitIncrease"
    MARKET_DECREASE = "MarketDecrease"
    LIMIT_DECREASE = "LimitDecrease"
    STOP_LOSS_DECREASE = "StopLossDecrease"
    LIQUIDATION = "Liquidation"


class DecreasePositionSwapType(str, Enum):
    NO_SWAP = "NoSwap"
    SWAP_PNL_TOKEN_TO_COLLATERAL_TOKEN = "SwapPnlTokenToCollateralToken"
    SWAP_COLLATERAL_TOKEN_TO_PNL_TOKEN = "SwapCollateralTokenToPnlToken"


class SecondaryOrderType(str, Enum):
    NONE = "None"
    ADL = "Adl"


class SelectorTable(Generic[E]):
    """Read-only mapping from canonical selector words to one enum type."""

    def __init__(self, enum_cls: type[E], selectors: Mapping[str, E]) -> None:
        table: dict[str, E] = {}
        for word, variant in selectors.items():
            norm = normalize_word(word)
            if norm is None:
                raise ValueError(f"invalid selector word for {enum_cls.__name__}: {word!r}")
            if not isinstance(variant, enum_cls):
                raise TypeError(f"{variant!r} is not a {enum_cls.__name__} variant")
            if norm in table:
                raise ValueError(f"duplicate selector {norm} in {enum_cls.__name__} table")
            table[norm] = variant
        self.enum_cls = enum_cls
        self._table: Mapping[str, E] = MappingProxyType(table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"SelectorTable({self.enum_cls.__name__}, {len(self)} variants)"

    def resolve(self, word: str | None) -> E | None:
        norm = normalize_word(word)
        if norm is None:
            return None
        return self._table.get(norm)

    def selector_of(self, variant: E) -> str:
        """Inverse lookup, used when building payloads."""
        for word, v in self._table.items():
            if v is variant:
                return word
        raise KeyError(variant)


def _w(n: int) -> str:
    return f"{n:064x}"


ORDER_TYPES: SelectorTable[OrderType] = SelectorTable(
    OrderType,
    {
        _w(0): OrderType.MARKET_SWAP,
        _w(1): OrderType.LIMIT_SWAP,
        _w(2): OrderType.MARKET_INCREASE,
        _w(3): OrderType.LIMIT_INCREASE,
        _w(4): OrderType.MARKET_DECREASE,
        _w(5): OrderType.LIMIT_DECREASE,
        _w(6): OrderType.STOP_LOSS_DECREASE,
        _w(7): OrderType.LIQUIDATION,
    },
)

DECREASE_POSITION_SWAP_TYPES: SelectorTable[DecreasePositionSwapType] = SelectorTable(
    DecreasePositionSwapType,
    {
        _w(0): DecreasePositionSwapType.NO_SWAP,
        _w(1): DecreasePositionSwapType.SWAP_PNL_TOKEN_TO_COLLATERAL_TOKEN,
        _w(2): DecreasePositionSwapType.SWAP_COLLATERAL_TOKEN_TO_PNL_TOKEN,
    },
)

SECONDARY_ORDER_TYPES: SelectorTable[SecondaryOrderType] = SelectorTable(
    SecondaryOrderType,
    {
        _w(0): SecondaryOrderType.NONE,
        _w(1): SecondaryOrderType.ADL,
    },
)
