"""Word codec: felt words → native values.

A word is a 64-char hex string (one felt). Every parser here is total:
malformed input yields ``None`` (or ``False`` for booleans), never an exception.
"""

from __future__ import annotations

import re

from eth_utils import keccak

WORD_HEX_CHARS = 64

_HEX_RE = re.compile(r"[0-9a-fA-F]+")
_U64_MAX = (1 << 64) - 1
_I64_MAX = (1 << 63) - 1
_MASK_250 = (1 << 250) - 1


def _strip_0x(word: str) -> str:
    return word[2:] if word[:2] in ("0x", "0X") else word


def _parse_hex(word: str | None) -> int | None:
    """Strict radix-16 parse (no sign, no underscores, no whitespace)."""
    if word is None:
        return None
    h = _strip_0x(word)
    if not h or not _HEX_RE.fullmatch(h):
        return None
    return int(h, 16)


def normalize_word(word: str | None) -> str | None:
    """Return the canonical form (64 lowercase hex chars, no 0x) or None."""
    if word is None:
        return None
    h = _strip_0x(word.strip())
    if not h or len(h) > WORD_HEX_CHARS or not _HEX_RE.fullmatch(h):
        return None
    return h.lower().rjust(WORD_HEX_CHARS, "0")


def to_address(word: str) -> str:
    """Return the left-padded ``0x`` address form of a word.

    Words that are not valid hex are passed through lowercased so that the
    original content is still visible downstream.
    """
    norm = normalize_word(word)
    if norm is None:
        return word.lower()
    return "0x" + norm


def to_felt(word: str | None) -> str | None:
    """Raw felt in normalized ``0x`` form (None if malformed)."""
    norm = normalize_word(word)
    return None if norm is None else "0x" + norm


def to_u64(word: str | None) -> int | None:
    v = _parse_hex(word)
    if v is None or v > _U64_MAX:
        return None
    return v


def to_integer_radix16(word: str | None) -> int | None:
    """Parse a word as a signed 64-bit integer; None on bad hex or overflow."""
    v = _parse_hex(word)
    if v is None or v > _I64_MAX:
        return None
    return v


def to_boolean(word: str | None) -> bool:
    # only the word encoding 1 is true; any other content reads as false
    return _parse_hex(word) == 1


def to_u128_decimal(high: str | None, low: str | None) -> int | None:
    """Rebuild a 128-bit value from its (high, low) 64-bit halves.

    Both halves must fit in an unsigned 64-bit integer. The word order is
    high first, then low.
    """
    hi = to_u64(high)
    lo = to_u64(low)
    if hi is None or lo is None:
        return None
    return (hi << 64) + lo


def split_words(csv: str) -> tuple[str, ...]:
    """Split a flat comma-separated payload into its words."""
    if not csv:
        return ()
    return tuple(w.strip() for w in csv.split(","))


def starknet_keccak(name: str) -> str:
    """Canonical event key for an event name (keccak-256 masked to 250 bits)."""
    digest = int.from_bytes(keccak(text=name), "big") & _MASK_250
    return f"{digest:064x}"
