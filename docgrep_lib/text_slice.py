"""
Text Slice - Byte-range slicing that never splits a UTF-8 character.

Context windows around a match are measured in bytes, not characters, so a
window edge regularly lands in the middle of a multi-byte character. The
helpers here move such an edge onto the nearest character boundary before
decoding, so snippets never contain partial characters.
"""


class InvalidRangeError(ValueError):
    """Byte range cannot be turned into valid text."""
    pass


def is_char_boundary(data: bytes, pos: int) -> bool:
    """
    Check whether a byte offset falls on a UTF-8 character boundary.

    Offsets 0 and len(data) are always boundaries. Any other offset is a
    boundary unless the byte at that position is a continuation byte
    (0b10xxxxxx).

    Args:
        data: UTF-8 encoded text
        pos: Byte offset to check

    Returns:
        True if a character starts (or the text ends) at pos
    """
    if pos == 0 or pos == len(data):
        return True
    if pos < 0 or pos > len(data):
        return False
    return (data[pos] & 0xC0) != 0x80


def safe_slice(data: bytes, start: int, end: int) -> str:
    """
    Decode data[start:end], shrinking the range onto character boundaries.

    A start offset inside a character is advanced to the next boundary and
    an end offset inside a character is retracted to the previous one, so
    the returned text only ever contains whole characters.

    Args:
        data: UTF-8 encoded text
        start: Byte offset where the slice begins
        end: Byte offset where the slice ends (exclusive)

    Returns:
        The decoded slice

    Raises:
        InvalidRangeError: If the offsets are out of bounds, or the adjusted
            range is inverted or does not decode
    """
    length = len(data)
    if start < 0 or end < 0 or start > length or end > length:
        raise InvalidRangeError(f"Byte range {start}..{end} outside 0..{length}")

    while start < length and not is_char_boundary(data, start):
        start += 1

    while end > 0 and not is_char_boundary(data, end):
        end -= 1

    if start > end:
        raise InvalidRangeError(f"Invalid byte range after adjustment: {start}..{end}")

    try:
        return data[start:end].decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidRangeError(f"Byte range {start}..{end} is not valid UTF-8: {e}") from e
