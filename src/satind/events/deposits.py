"""Deposit events (market token mints)."""

from __future__ import annotations

from dataclasses import dataclass

from satind.core.models import EventRecord
from satind.decoding.specs import EventSpec, FieldSpec
from satind.decoding.words import starknet_keccak


@dataclass(slots=True, frozen=True, kw_only=True)
class DepositCreated(EventRecord):
    key: str | None = None
    account: str | None = None
    receiver: str | None = None
    callback_contract: str | None = None
    ui_fee_receiver: str | None = None
    market: str | None = None
    initial_long_token: str | None = None
    initial_short_token: str | None = None
    long_token_swap_path: tuple[str, ...] | None = None
    short_token_swap_path: tuple[str, ...] | None = None
    initial_long_token_amount: int | None = None
    initial_short_token_amount: int | None = None
    min_market_tokens: int | None = None
    updated_at_block: int | None = None
    execution_fee: int | None = None
    callback_gas_limit: int | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class DepositCancelled(EventRecord):
    key: str | None = None
    reason: str | None = None
    reason_bytes: tuple[str, ...] | None = None


DEPOSIT_CREATED = EventSpec(
    key=starknet_keccak("DepositCreated"),
    name="DepositCreated",
    table="deposits",
    record_type=DepositCreated,
    fields=(
        FieldSpec("key", "felt"),
        FieldSpec("deposit_key", "skip"),
        FieldSpec("account", "address"),
        FieldSpec("receiver", "address"),
        FieldSpec("callback_contract", "address"),
        FieldSpec("ui_fee_receiver", "address"),
        FieldSpec("market", "address"),
        FieldSpec("initial_long_token", "address"),
        FieldSpec("initial_short_token", "address"),
        FieldSpec("long_token_swap_path", "address_array"),
        FieldSpec("short_token_swap_path", "address_array"),
        FieldSpec("initial_long_token_amount", "u128"),
        FieldSpec("initial_short_token_amount", "u128"),
        FieldSpec("min_market_tokens", "u128"),
        FieldSpec("updated_at_block", "i64"),
        FieldSpec("execution_fee", "u128"),
        FieldSpec("callback_gas_limit", "u128"),
    ),
)

DEPOSIT_CANCELLED = EventSpec(
    key=starknet_keccak("DepositCancelled"),
    name="DepositCancelled",
    table="deposit_cancellations",
    record_type=DepositCancelled,
    fields=(
        FieldSpec("key", "felt"),
        FieldSpec("reason", "felt"),
        FieldSpec("reason_bytes", "felt_array"),
    ),
)

DEPOSIT_SPECS = (DEPOSIT_CREATED, DEPOSIT_CANCELLED)
