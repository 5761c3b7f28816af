"""Unit tests for boundary-safe byte slicing."""

import pytest

from docgrep_lib.text_slice import InvalidRangeError, is_char_boundary, safe_slice

MIXED = "He东风送llo, 世界！狂担负了".encode("utf-8")


class TestIsCharBoundary:
    def test_ends_are_boundaries(self):
        assert is_char_boundary(MIXED, 0)
        assert is_char_boundary(MIXED, len(MIXED))

    def test_inside_multibyte_char(self):
        # 东 occupies bytes 2..4
        assert is_char_boundary(MIXED, 2)
        assert not is_char_boundary(MIXED, 3)
        assert not is_char_boundary(MIXED, 4)
        assert is_char_boundary(MIXED, 5)

    def test_out_of_range(self):
        assert not is_char_boundary(MIXED, -1)
        assert not is_char_boundary(MIXED, len(MIXED) + 1)


class TestSafeSlice:
    def test_ascii_slice_unchanged(self):
        assert safe_slice(b"hello world", 6, 11) == "world"

    def test_start_advances_to_next_boundary(self):
        data = "He东风".encode("utf-8")
        assert safe_slice(data, 3, len(data)) == "风"

    def test_end_retracts_to_previous_boundary(self):
        data = "He东风".encode("utf-8")
        assert safe_slice(data, 0, 3) == "He"

    def test_range_inside_one_char_fails(self):
        data = "He东风".encode("utf-8")
        with pytest.raises(InvalidRangeError):
            safe_slice(data, 3, 4)

    def test_empty_range(self):
        assert safe_slice(MIXED, 2, 2) == ""

    def test_out_of_bounds_fails(self):
        with pytest.raises(InvalidRangeError):
            safe_slice(b"abc", 0, 5)
        with pytest.raises(InvalidRangeError):
            safe_slice(b"abc", -1, 2)

    def test_never_returns_partial_characters(self):
        for start in range(len(MIXED) + 1):
            for end in range(start, len(MIXED) + 1):
                try:
                    piece = safe_slice(MIXED, start, end)
                except InvalidRangeError:
                    continue
                encoded = piece.encode("utf-8")
                assert encoded in MIXED
                assert len(encoded) <= end - start
