"""Market factory events."""

from __future__ import annotations

from dataclasses import dataclass

from satind.core.models import EventRecord
from satind.decoding.specs import EventSpec, FieldSpec
from satind.decoding.words import starknet_keccak


@dataclass(slots=True, frozen=True, kw_only=True)
class MarketCreated(EventRecord):
    creator: str | None = None
    market_token: str | None = None
    index_token: str | None = None
    long_token: str | None = None
    short_token: str | None = None
    market_type: str | None = None


MARKET_CREATED = EventSpec(
    key=starknet_keccak("MarketCreated"),
    name="MarketCreated",
    table="markets",
    record_type=MarketCreated,
    fields=(
        FieldSpec("creator", "address"),
        FieldSpec("market_token", "address"),
        FieldSpec("index_token", "address"),
        FieldSpec("long_token", "address"),
        FieldSpec("short_token", "address"),
        FieldSpec("market_type", "felt"),
    ),
)

MARKET_SPECS = (MARKET_CREATED,)
