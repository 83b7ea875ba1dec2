from enum import Enum

import pytest

from payloads import w
from satind.decoding.selectors import (
    DECREASE_POSITION_SWAP_TYPES,
    ORDER_TYPES,
    SECONDARY_ORDER_TYPES,
    DecreasePositionSwapType,
    OrderType,
    SecondaryOrderType,
    SelectorTable,
)


def test_liquidation_selector():
    assert ORDER_TYPES.resolve(w(7)) is OrderType.LIQUIDATION


def test_every_order_type_is_mapped():
    assert len(ORDER_TYPES) == len(OrderType) == 8
    assert [ORDER_TYPES.resolve(w(i)) for i in range(8)] == list(OrderType)


@pytest.mark.parametrize("word", [w(8), w(1 << 200), "zz", "", None])
def test_unmapped_selector_is_absent(word):
    assert ORDER_TYPES.resolve(word) is None


def test_short_selector_is_normalized():
    assert ORDER_TYPES.resolve("0x2") is OrderType.MARKET_INCREASE


def test_decrease_position_swap_types():
    assert DECREASE_POSITION_SWAP_TYPES.resolve(w(0)) is DecreasePositionSwapType.NO_SWAP
    assert (
        DECREASE_POSITION_SWAP_TYPES.resolve(w(2))
        is DecreasePositionSwapType.SWAP_COLLATERAL_TOKEN_TO_PNL_TOKEN
    )
    assert DECREASE_POSITION_SWAP_TYPES.resolve(w(3)) is None


def test_secondary_order_types():
    assert SECONDARY_ORDER_TYPES.resolve(w(1)) is SecondaryOrderType.ADL


def test_selector_of_is_inverse():
    assert ORDER_TYPES.selector_of(OrderType.LIMIT_DECREASE) == w(5)


class Color(Enum):
    RED = 1


def test_table_rejects_duplicates_and_foreign_variants():
    with pytest.raises(ValueError):
        SelectorTable(Color, {"0x1": Color.RED, w(1): Color.RED})
    with pytest.raises(TypeError):
        SelectorTable(Color, {w(0): OrderType.MARKET_SWAP})
    with pytest.raises(ValueError):
        SelectorTable(Color, {"nope": Color.RED})
