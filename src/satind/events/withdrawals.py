"""Withdrawal events (market token burns)."""

from __future__ import annotations

from dataclasses import dataclass

from satind.core.models import EventRecord
from satind.decoding.specs import EventSpec, FieldSpec
from satind.decoding.words import starknet_keccak


@dataclass(slots=True, frozen=True, kw_only=True)
class WithdrawalCreated(EventRecord):
    key: str | None = None
    account: str | None = None
    receiver: str | None = None
    callback_contract: str | None = None
    ui_fee_receiver: str | None = None
    market: str | None = None
    long_token_swap_path: tuple[str, ...] | None = None
    short_token_swap_path: tuple[str, ...] | None = None
    market_token_amount: int | None = None
    min_long_token_amount: int | None = None
    min_short_token_amount: int | None = None
    updated_at_block: int | None = None
    execution_fee: int | None = None
    callback_gas_limit: int | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class WithdrawalCancelled(EventRecord):
    key: str | None = None
    reason: str | None = None
    reason_bytes: tuple[str, ...] | None = None


WITHDRAWAL_CREATED = EventSpec(
    key=starknet_keccak("WithdrawalCreated"),
    name="WithdrawalCreated",
    table="withdrawals",
    record_type=WithdrawalCreated,
    fields=(
        FieldSpec("key", "felt"),
        FieldSpec("withdrawal_key", "skip"),
        FieldSpec("account", "address"),
        FieldSpec("receiver", "address"),
        FieldSpec("callback_contract", "address"),
        FieldSpec("ui_fee_receiver", "address"),
        FieldSpec("market", "address"),
        FieldSpec("long_token_swap_path", "address_array"),
        FieldSpec("short_token_swap_path", "address_array"),
        FieldSpec("market_token_amount", "u128"),
        FieldSpec("min_long_token_amount", "u128"),
        FieldSpec("min_short_token_amount", "u128"),
        FieldSpec("updated_at_block", "i64"),
        FieldSpec("execution_fee", "u128"),
        FieldSpec("callback_gas_limit", "u128"),
    ),
)

WITHDRAWAL_CANCELLED = EventSpec(
    key=starknet_keccak("WithdrawalCancelled"),
    name="WithdrawalCancelled",
    table="withdrawal_cancellations",
    record_type=WithdrawalCancelled,
    fields=(
        FieldSpec("key", "felt"),
        FieldSpec("reason", "felt"),
        FieldSpec("reason_bytes", "felt_array"),
    ),
)

WITHDRAWAL_SPECS = (WITHDRAWAL_CREATED, WITHDRAWAL_CANCELLED)
