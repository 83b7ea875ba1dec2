from payloads import w
from satind.decoding.cursor import FieldCursor, Slot, resolve_layout


def test_suffix_is_shifted_by_array_length():
    words = [w(9), w(2), w(0xA), w(0xB), w(1), w(2), w(3)]
    slots = resolve_layout([("head", 1), ("path", None), ("pair", 2), ("tail", 1)], words)

    assert slots["path"] == Slot("path", 2, 2, length_index=1)
    assert slots["pair"] == Slot("pair", 4, 2)
    assert slots["tail"].index == 6


def test_offsets_accumulate_across_arrays():
    words = [w(1), w(0xA), w(3), w(0xB), w(0xC), w(0xD), w(42)]
    slots = resolve_layout([("first", None), ("second", None), ("tail", 1)], words)

    assert slots["first"].width == 1
    assert slots["second"] == Slot("second", 3, 3, length_index=2)
    assert slots["tail"].index == 6


def test_zero_length_keeps_base_offsets():
    slots = resolve_layout([("head", 1), ("path", None), ("tail", 1)], [w(1), w(0), w(5)])
    assert slots["path"].width == 0
    assert slots["tail"].index == 2


def test_missing_or_garbage_length_counts_as_zero():
    assert resolve_layout([("path", None), ("tail", 1)], [])["tail"].index == 1
    assert resolve_layout([("path", None), ("tail", 1)], ["zz", w(5)])["tail"].index == 1


def test_reads_past_the_payload_are_absent():
    cursor = FieldCursor([w(1)])
    slot = cursor.fixed("pair", 2)
    assert cursor.read(slot) == (w(1), None)
    assert cursor.word(-1) is None


def test_huge_length_is_clamped_on_read():
    cursor = FieldCursor([w(1 << 62), w(0xA), w(0xB)])
    path = cursor.array("path")
    tail = cursor.fixed("tail")

    assert cursor.read_elements(path) == (w(0xA), w(0xB))
    assert cursor.read(tail) == (None,)
