"""Order lifecycle events: created, updated, executed, cancelled, frozen."""

from __future__ import annotations

from dataclasses import dataclass

from satind.core.models import EventRecord
from satind.decoding.selectors import (
    DECREASE_POSITION_SWAP_TYPES,
    ORDER_TYPES,
    SECONDARY_ORDER_TYPES,
    DecreasePositionSwapType,
    OrderType,
    SecondaryOrderType,
)
from satind.decoding.specs import EventSpec, FieldSpec
from satind.decoding.words import starknet_keccak

# Key as emitted by the data store for a newly created order.
ORDER_CREATED_KEY = "03427759bfd3b941f14e687e129519da3c9b0046c5b9aaa290bb1dede63753b3"


# ---------- records ----------


@dataclass(slots=True, frozen=True, kw_only=True)
class OrderCreated(EventRecord):
    key: str | None = None
    order_type: OrderType | None = None
    decrease_position_swap_type: DecreasePositionSwapType | None = None
    account: str | None = None
    receiver: str | None = None
    callback_contract: str | None = None
    ui_fee_receiver: str | None = None
    market: str | None = None
    initial_collateral_token: str | None = None
    swap_path: tuple[str, ...] | None = None
    size_delta_usd: int | None = None
    initial_collateral_delta_amount: int | None = None
    trigger_price: int | None = None
    acceptable_price: int | None = None
    execution_fee: int | None = None
    callback_gas_limit: int | None = None
    min_output_amount: int | None = None
    updated_at_block: int | None = None
    is_long: bool | None = None
    is_frozen: bool | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class OrderUpdated(EventRecord):
    key: str | None = None
    size_delta_usd: int | None = None
    acceptable_price: int | None = None
    trigger_price: int | None = None
    min_output_amount: int | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class OrderExecuted(EventRecord):
    key: str | None = None
    secondary_order_type: SecondaryOrderType | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class OrderCancelled(EventRecord):
    key: str | None = None
    reason: str | None = None
    reason_bytes: tuple[str, ...] | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class OrderFrozen(EventRecord):
    key: str | None = None
    reason: str | None = None
    reason_bytes: tuple[str, ...] | None = None


# ---------- layouts ----------

_REASON_FIELDS = (
    FieldSpec("key", "felt"),
    FieldSpec("reason", "felt"),
    FieldSpec("reason_bytes", "felt_array"),
)

ORDER_CREATED = EventSpec(
    key=ORDER_CREATED_KEY,
    name="OrderCreated",
    table="orders",
    record_type=OrderCreated,
    fields=(
        FieldSpec("key", "felt"),
        FieldSpec("order_key", "skip"),  # the order struct repeats its key
        FieldSpec("order_type", "enum", ORDER_TYPES),
        FieldSpec("decrease_position_swap_type", "enum", DECREASE_POSITION_SWAP_TYPES),
        FieldSpec("account", "address"),
        FieldSpec("receiver", "address"),
        FieldSpec("callback_contract", "address"),
        FieldSpec("ui_fee_receiver", "address"),
        FieldSpec("market", "address"),
        FieldSpec("initial_collateral_token", "address"),
        FieldSpec("swap_path", "address_array"),
        FieldSpec("size_delta_usd", "u128"),
        FieldSpec("initial_collateral_delta_amount", "u128"),
        FieldSpec("trigger_price", "u128"),
        FieldSpec("acceptable_price", "u128"),
        FieldSpec("execution_fee", "u128"),
        FieldSpec("callback_gas_limit", "u128"),
        FieldSpec("min_output_amount", "u128"),
        FieldSpec("updated_at_block", "i64"),
        FieldSpec("is_long", "bool"),
        FieldSpec("is_frozen", "bool"),
    ),
)

ORDER_UPDATED = EventSpec(
    key=starknet_keccak("OrderUpdated"),
    name="OrderUpdated",
    table="order_updates",
    record_type=OrderUpdated,
    fields=(
        FieldSpec("key", "felt"),
        FieldSpec("size_delta_usd", "u128"),
        FieldSpec("acceptable_price", "u128"),
        FieldSpec("trigger_price", "u128"),
        FieldSpec("min_output_amount", "u128"),
    ),
)

ORDER_EXECUTED = EventSpec(
    key=starknet_keccak("OrderExecuted"),
    name="OrderExecuted",
    table="order_executions",
    record_type=OrderExecuted,
    fields=(
        FieldSpec("key", "felt"),
        FieldSpec("secondary_order_type", "enum", SECONDARY_ORDER_TYPES),
    ),
)

ORDER_CANCELLED = EventSpec(
    key=starknet_keccak("OrderCancelled"),
    name="OrderCancelled",
    table="order_cancellations",
    record_type=OrderCancelled,
    fields=_REASON_FIELDS,
)

ORDER_FROZEN = EventSpec(
    key=starknet_keccak("OrderFrozen"),
    name="OrderFrozen",
    table="order_freezes",
    record_type=OrderFrozen,
    fields=_REASON_FIELDS,
)

ORDER_SPECS = (ORDER_CREATED, ORDER_UPDATED, ORDER_EXECUTED, ORDER_CANCELLED, ORDER_FROZEN)
