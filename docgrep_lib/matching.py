"""
Matching - Locate query occurrences and wrap them in highlighted snippets.

A query is either a literal substring or a compiled regular expression.
It is compiled once per search and shared by every file in that search.

Spans are byte offsets into the UTF-8 encoding of the searched text, so
that context windows (a fixed number of bytes on each side of a match)
can be carved out with docgrep_lib.text_slice.

Example:
    query = compile_query("hello", is_regex=False)
    find_matches("hello world hello", query, 2, "[", "]")
    # ['[hello] w', 'd [hello]']
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, NamedTuple, Optional, Union

from docgrep_lib.text_slice import InvalidRangeError, safe_slice

logger = logging.getLogger(__name__)


class SearchError(Exception):
    """Base exception for search errors."""
    pass


class InvalidQueryError(SearchError):
    """Query is empty or is not a valid regular expression."""
    pass


class MatchSpan(NamedTuple):
    """Byte range of one match: start inclusive, end exclusive."""
    start: int
    end: int


@dataclass(frozen=True)
class LiteralQuery:
    """Exact substring, matched case-sensitively."""
    needle: str

    @property
    def source(self) -> str:
        return self.needle


@dataclass(frozen=True)
class PatternQuery:
    """Compiled regular expression."""
    pattern: re.Pattern
    source: str


Query = Union[LiteralQuery, PatternQuery]


def compile_query(search: str, is_regex: bool, ignore_case: bool = False) -> Query:
    """
    Build the query used for a whole search.

    In literal mode with ignore_case the needle is compiled as an escaped
    regular expression, which yields the same spans the literal scan would
    on text where case already agrees.

    Args:
        search: Query string as typed by the user
        is_regex: Treat search as a regular expression
        ignore_case: Case-insensitive matching

    Returns:
        LiteralQuery or PatternQuery

    Raises:
        InvalidQueryError: If the pattern does not compile, or a literal
            query is empty
    """
    flags = re.IGNORECASE if ignore_case else 0

    if is_regex:
        try:
            return PatternQuery(re.compile(search, flags), search)
        except re.error as e:
            raise InvalidQueryError(f"Invalid regular expression {search!r}: {e}") from e

    if not search:
        raise InvalidQueryError("Search query cannot be empty")

    if ignore_case:
        return PatternQuery(re.compile(re.escape(search), flags), search)

    return LiteralQuery(search)


def _find_literal(data: bytes, needle: bytes) -> Iterator[MatchSpan]:
    # UTF-8 is self-synchronizing: a valid needle only matches at boundaries
    offset = 0
    while True:
        index = data.find(needle, offset)
        if index < 0:
            return
        end = index + len(needle)
        yield MatchSpan(index, end)
        offset = end


def _find_pattern(text: str, pattern: re.Pattern) -> Iterator[MatchSpan]:
    # Character offsets from re are converted to byte offsets incrementally,
    # encoding only the stretch between consecutive match edges.
    char_pos = 0
    byte_pos = 0

    for match in pattern.finditer(text):
        start = byte_pos + len(text[char_pos:match.start()].encode("utf-8"))
        end = start + len(match.group().encode("utf-8"))
        char_pos = match.end()
        byte_pos = end
        yield MatchSpan(start, end)


def find_spans(text: str, query: Query, data: Optional[bytes] = None) -> Iterator[MatchSpan]:
    """
    Yield the byte spans of every non-overlapping match, left to right.

    Args:
        text: Text to search
        query: Compiled query from compile_query()
        data: text already encoded as UTF-8, to avoid encoding twice

    Yields:
        MatchSpan objects in increasing order
    """
    if isinstance(query, PatternQuery):
        yield from _find_pattern(text, query.pattern)
        return

    if not query.needle:
        raise InvalidQueryError("Search query cannot be empty")

    if data is None:
        data = text.encode("utf-8")
    yield from _find_literal(data, query.needle.encode("utf-8"))


def _context(data: bytes, start: int, end: int, side: str) -> str:
    try:
        return safe_slice(data, start, end)
    except InvalidRangeError as e:
        logger.debug(f"Dropping {side} context: {e}")
        return ""


def wrap_match(
    data: bytes,
    span: MatchSpan,
    context_size: int,
    prefix: str,
    postfix: str,
) -> str:
    """
    Build one snippet: left context, prefix, match, postfix, right context.

    Each context side covers up to context_size bytes and is shrunk onto
    character boundaries. A side that cannot be sliced is left empty.

    Args:
        data: UTF-8 encoded text the span refers to
        span: Match location
        context_size: Bytes of context on each side
        prefix: Marker inserted before the match
        postfix: Marker inserted after the match

    Returns:
        Snippet string
    """
    left_start = max(0, span.start - context_size)
    right_end = min(len(data), span.end + context_size)

    left = _context(data, left_start, span.start, "left")
    right = _context(data, span.end, right_end, "right")
    matched = data[span.start:span.end].decode("utf-8", errors="replace")

    return f"{left}{prefix}{matched}{postfix}{right}"


def find_matches(
    text: str,
    query: Query,
    context_size: int,
    prefix: str,
    postfix: str,
) -> list[str]:
    """
    Find every match of query in text and return highlighted snippets.

    Args:
        text: Text to search
        query: Compiled query from compile_query()
        context_size: Bytes of context on each side of a match
        prefix: Marker inserted before each match
        postfix: Marker inserted after each match

    Returns:
        Snippets in match order; empty list when nothing matches
    """
    if context_size < 0:
        raise ValueError(f"context_size must be >= 0, got {context_size}")

    data = text.encode("utf-8")
    return [
        wrap_match(data, span, context_size, prefix, postfix)
        for span in find_spans(text, query, data)
    ]
