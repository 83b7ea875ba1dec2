"""Typed records and decoding layouts for every indexed protocol event."""

from satind.events.deposits import DEPOSIT_SPECS, DepositCancelled, DepositCreated
from satind.events.markets import MARKET_SPECS, MarketCreated
from satind.events.orders import (
    ORDER_CREATED,
    ORDER_CREATED_KEY,
    ORDER_SPECS,
    OrderCancelled,
    OrderCreated,
    OrderExecuted,
    OrderFrozen,
    OrderUpdated,
)
from satind.events.withdrawals import WITHDRAWAL_SPECS, WithdrawalCancelled, WithdrawalCreated

ALL_SPECS = ORDER_SPECS + DEPOSIT_SPECS + WITHDRAWAL_SPECS + MARKET_SPECS

__all__ = [
    "ALL_SPECS",
    "DEPOSIT_SPECS",
    "MARKET_SPECS",
    "ORDER_CREATED",
    "ORDER_CREATED_KEY",
    "ORDER_SPECS",
    "WITHDRAWAL_SPECS",
    "DepositCancelled",
    "DepositCreated",
    "MarketCreated",
    "OrderCancelled",
    "OrderCreated",
    "OrderExecuted",
    "OrderFrozen",
    "OrderUpdated",
    "WithdrawalCancelled",
    "WithdrawalCreated",
]
