"""
File Search - Recursive search with highlighted context snippets.

Walks a directory tree, extracts the text of every file (stripping markup
for HTML-like files), finds every occurrence of a literal or regex query and
returns one FileSearchResult per file that has matches:

    {"path": "/docs/a.txt", "matches": ["...left <b>hit</b> right..."]}

Failure policy:
- An invalid query raises InvalidQueryError before the tree is touched
- An unreadable file or directory is logged and skipped
- Everything else produces a (possibly empty) result list

Results follow the filesystem's own listing order (depth-first, pre-order);
nothing is sorted.
"""

import fnmatch
import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional

from docgrep_lib.config import CONFIG_FILENAME, IGNORE_FILENAME
from docgrep_lib.file_extract import (
    BinaryFileError,
    FileUnreadableError,
    extract_text,
    normalize_extensions,
)
from docgrep_lib.matching import (
    InvalidQueryError,
    Query,
    SearchError,
    compile_query,
    find_matches,
)

logger = logging.getLogger(__name__)

# Constants
DEFAULT_CONTEXT_SIZE = 50  # bytes on each side of a match
DEFAULT_PREFIX = "<b>"
DEFAULT_POSTFIX = "</b>"
DEFAULT_MARKUP_EXTENSIONS = ("html", "htm", "xrtm")

# Never searched while walking a directory
TOOL_FILENAMES = (CONFIG_FILENAME, IGNORE_FILENAME)


class SubtreeUnreadableError(SearchError):
    """Directory could not be listed."""
    pass


@dataclass
class FileSearchResult:
    """All snippets found in one file."""
    path: str
    matches: list[str] = field(default_factory=list)

    @property
    def match_count(self) -> int:
        return len(self.matches)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {"path": self.path, "matches": list(self.matches)}


@dataclass
class SearchOptions:
    """Presentation and filtering settings shared by every file in a search."""
    context_size: int = DEFAULT_CONTEXT_SIZE
    prefix: str = DEFAULT_PREFIX
    postfix: str = DEFAULT_POSTFIX
    markup_extensions: frozenset = frozenset(DEFAULT_MARKUP_EXTENSIONS)
    exclude_patterns: tuple = ()

    def __post_init__(self):
        if self.context_size < 0:
            raise ValueError(f"context_size must be >= 0, got {self.context_size}")
        self.markup_extensions = frozenset(normalize_extensions(self.markup_extensions))
        self.exclude_patterns = tuple(self.exclude_patterns or ())


def _is_excluded(path: Path, root_path: Path, exclude_patterns: tuple) -> bool:
    """
    Check a path against glob patterns.

    A pattern matches the entry name or its path relative to the search
    root; a trailing '/' limits the pattern to directories.
    """
    if not exclude_patterns:
        return False

    try:
        rel_str = path.relative_to(root_path).as_posix()
    except ValueError:
        rel_str = path.name

    for pattern in exclude_patterns:
        if pattern.endswith("/"):
            if not path.is_dir():
                continue
            pattern = pattern.rstrip("/")
        pattern = pattern[2:] if pattern.startswith("./") else pattern

        if fnmatch.fnmatch(path.name, pattern) or fnmatch.fnmatch(rel_str, pattern):
            return True

    return False


def _list_entries(dir_path: Path) -> list[os.DirEntry]:
    """List a directory in the platform's enumeration order."""
    try:
        with os.scandir(dir_path) as it:
            return list(it)
    except OSError as e:
        raise SubtreeUnreadableError(f"Cannot list directory {dir_path}: {e}") from e


def _dir_key(path) -> Optional[tuple[int, int]]:
    try:
        st = os.stat(path)
    except OSError:
        return None
    return (st.st_dev, st.st_ino)


def search_file_content(filepath: Path, query: Query, options: SearchOptions) -> list[str]:
    """
    Search one file and return its snippets.

    An unreadable file is logged and contributes no snippets.

    Args:
        filepath: File to search
        query: Compiled query
        options: Presentation settings

    Returns:
        List of snippets, empty if the file has no matches or is unreadable
    """
    try:
        text = extract_text(filepath, options.markup_extensions)
        return find_matches(text, query, options.context_size, options.prefix, options.postfix)
    except BinaryFileError as e:
        logger.debug(str(e))
    except FileUnreadableError as e:
        logger.warning(f"Skipping {filepath}: {e}")
    except Exception as e:
        logger.warning(f"Error processing {filepath}: {e}")
    return []


def iter_search_results(
    dir_path: Path,
    query: Query,
    options: Optional[SearchOptions] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Iterator[FileSearchResult]:
    """
    Lazily walk a directory tree and yield results for files with matches.

    The walk keeps an explicit stack of pending directory listings instead
    of recursing, so tree depth is not limited by the interpreter stack.
    Directories reached twice through symlinks are only searched once.

    Args:
        dir_path: Root directory
        query: Compiled query from compile_query()
        options: Presentation and filtering settings
        cancel_event: When set, the walk stops before the next entry

    Yields:
        FileSearchResult for each file with at least one match
    """
    if options is None:
        options = SearchOptions()

    root_path = Path(dir_path)

    try:
        root_entries = _list_entries(root_path)
    except SubtreeUnreadableError as e:
        logger.error(str(e))
        return

    visited = set()
    root_key = _dir_key(root_path)
    if root_key is not None:
        visited.add(root_key)
    stack = [iter(root_entries)]

    while stack:
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"Search of {root_path} cancelled")
            return

        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        path = Path(entry.path)
        if entry.name in TOOL_FILENAMES:
            logger.debug(f"Skipping config file: {path}")
            continue
        if _is_excluded(path, root_path, options.exclude_patterns):
            logger.debug(f"Excluding: {path}")
            continue

        try:
            is_file = entry.is_file()
            is_dir = not is_file and entry.is_dir()
        except OSError as e:
            logger.warning(f"Cannot stat {path}: {e}")
            continue

        if is_file:
            matches = search_file_content(path, query, options)
            if matches:
                yield FileSearchResult(path=str(path), matches=matches)

        elif is_dir:
            key = _dir_key(path)
            if key in visited:
                logger.debug(f"Already searched, skipping: {path}")
                continue
            if key is not None:
                visited.add(key)

            try:
                children = _list_entries(path)
            except SubtreeUnreadableError as e:
                logger.warning(str(e))
                continue
            stack.append(iter(children))


def search_in_dir(
    dir_path: Path,
    search: str,
    is_regex: bool = False,
    context_size: int = DEFAULT_CONTEXT_SIZE,
    prefix: str = DEFAULT_PREFIX,
    postfix: str = DEFAULT_POSTFIX,
    markup_extensions: Iterable[str] = DEFAULT_MARKUP_EXTENSIONS,
    exclude_patterns: Optional[Iterable[str]] = None,
    ignore_case: bool = False,
    cancel_event: Optional[threading.Event] = None,
) -> list[FileSearchResult]:
    """
    Search every file under a directory.

    Args:
        dir_path: Root directory to search
        search: Query string (regex if is_regex, else literal)
        is_regex: Treat search as a regular expression
        context_size: Bytes of context on each side of a match
        prefix: Marker inserted before each match
        postfix: Marker inserted after each match
        markup_extensions: Extensions whose content is stripped of markup
        exclude_patterns: Glob patterns for entries to skip
        ignore_case: Case-insensitive matching
        cancel_event: When set, stop and return what was found so far

    Returns:
        List of FileSearchResult in walk order

    Raises:
        InvalidQueryError: If the query is empty or not a valid pattern
    """
    # Compiled before touching the filesystem
    query = compile_query(search, is_regex, ignore_case)
    options = SearchOptions(
        context_size=context_size,
        prefix=prefix,
        postfix=postfix,
        markup_extensions=markup_extensions,
        exclude_patterns=tuple(exclude_patterns or ()),
    )

    results = list(iter_search_results(Path(dir_path), query, options, cancel_event))
    logger.debug(f"Found matches in {len(results)} files under {dir_path}")
    return results


def search_in_file(
    file_path: Path,
    search: str,
    is_regex: bool = False,
    context_size: int = DEFAULT_CONTEXT_SIZE,
    prefix: str = DEFAULT_PREFIX,
    postfix: str = DEFAULT_POSTFIX,
    markup_extensions: Iterable[str] = DEFAULT_MARKUP_EXTENSIONS,
    ignore_case: bool = False,
) -> list[FileSearchResult]:
    """
    Search a single file.

    Same arguments as search_in_dir(). Returns a one-element list when the
    file has matches, otherwise an empty list.

    Raises:
        InvalidQueryError: If the query is empty or not a valid pattern
    """
    query = compile_query(search, is_regex, ignore_case)
    options = SearchOptions(
        context_size=context_size,
        prefix=prefix,
        postfix=postfix,
        markup_extensions=markup_extensions,
    )

    path = Path(file_path)
    matches = search_file_content(path, query, options)
    if not matches:
        return []
    return [FileSearchResult(path=str(path), matches=matches)]
