"""Field cursor: resolve word indices across variable-length arrays.

Payload fields are laid out back to back. A variable-length field is a length
word followed by that many element words, so every field declared after it is
shifted by its length. The cursor walks a declared layout left to right and
hands out a `Slot` per field, accumulating the shift of every array seen so far.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from satind.decoding.words import to_integer_radix16


@dataclass(frozen=True, slots=True)
class Slot:
    """Resolved position of one field in the payload."""

    name: str
    index: int  # first word of the field (first element for arrays)
    width: int  # words covered (element count for arrays)
    length_index: int | None = None  # position of the length word, arrays only

    @property
    def end(self) -> int:
        return self.index + self.width


class FieldCursor:
    """Sequential reader over a payload's words."""

    def __init__(self, words: Sequence[str]) -> None:
        self.words = words
        self.index = 0

    def word(self, i: int) -> str | None:
        """Word at ``i`` or None when the payload is too short."""
        if 0 <= i < len(self.words):
            return self.words[i]
        return None

    def fixed(self, name: str, width: int = 1) -> Slot:
        slot = Slot(name, self.index, width)
        self.index += width
        return slot

    def array(self, name: str) -> Slot:
        """Consume a length word plus that many elements.

        A missing or unparseable length counts as zero.
        """
        length_index = self.index
        length = to_integer_radix16(self.word(length_index)) or 0
        slot = Slot(name, length_index + 1, length, length_index=length_index)
        self.index = slot.end
        return slot

    def read(self, slot: Slot) -> tuple[str | None, ...]:
        """Words covered by ``slot``; positions past the payload are None."""
        return tuple(self.word(i) for i in range(slot.index, slot.end))

    def read_elements(self, slot: Slot) -> tuple[str, ...]:
        """Array elements actually present (clamped to the payload)."""
        return tuple(self.words[slot.index : slot.end])


def resolve_layout(
    fields: Iterable[tuple[str, int | None]],
    words: Sequence[str],
) -> dict[str, Slot]:
    """Resolve a whole layout in one pass.

    ``fields`` is an ordered sequence of ``(name, width)`` pairs where a width
    of ``None`` marks a variable-length array.
    """
    cursor = FieldCursor(words)
    out: dict[str, Slot] = {}
    for name, width in fields:
        out[name] = cursor.array(name) if width is None else cursor.fixed(name, width)
    return out
