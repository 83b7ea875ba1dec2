"""Protocol registries built from the declarative specs in `satind.events`.

All registries are composable and can be merged with `{**a, **b}` syntax.

Example
-------
>>> from satind.decoding.registries import make_order_registry, make_market_registry
>>> reg = {**make_order_registry(), **make_market_registry()}
"""

from __future__ import annotations

from satind.decoding.registry import make_registry
from satind.decoding.specs import EventRegistry
from satind.events import ALL_SPECS, DEPOSIT_SPECS, MARKET_SPECS, ORDER_SPECS, WITHDRAWAL_SPECS


def make_order_registry() -> EventRegistry:
    """Order lifecycle events (created/updated/executed/cancelled/frozen)."""
    return make_registry(ORDER_SPECS)


def make_deposit_registry() -> EventRegistry:
    return make_registry(DEPOSIT_SPECS)


def make_withdrawal_registry() -> EventRegistry:
    return make_registry(WITHDRAWAL_SPECS)


def make_market_registry() -> EventRegistry:
    return make_registry(MARKET_SPECS)


def make_protocol_registry() -> EventRegistry:
    """Every event type the indexer knows how to decode."""
    return make_registry(ALL_SPECS)
