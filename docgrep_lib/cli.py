#!/usr/bin/env python3
"""
Command line entry point.

Examples:
    # Literal search, JSON output
    docgrep ~/notes "release date"

    # Regex search with 20 bytes of context, Markdown output
    docgrep -e -C 20 --format md ~/site "co\\S+"

    # Single file, custom markers
    docgrep --prefix "[" --postfix "]" page.html hello

Exit codes: 0 matches found, 1 no matches, 2 invalid query, config or output.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from docgrep_lib import __version__
from docgrep_lib.config import ConfigError, load_config
from docgrep_lib.export import EXPORT_FORMATS, cmd_export
from docgrep_lib.matching import InvalidQueryError
from docgrep_lib.search import search_in_dir, search_in_file

logger = logging.getLogger(__name__)


def cmd_search(
    path: Path,
    query: str,
    is_regex: bool = False,
    config: Optional[dict] = None,
) -> dict:
    """
    Run a search over a directory or a single file.

    Args:
        path: Directory or file to search
        query: Query string
        is_regex: Treat query as a regular expression
        config: Effective configuration (see config.DEFAULT_CONFIG)

    Returns:
        Dictionary with:
        - query: Original query
        - path: Searched path
        - total_matches: Number of snippets
        - file_count: Number of files with matches
        - results: List of {path, matches}
        - error: Error message if any
    """
    if config is None:
        config = load_config(path)

    common = dict(
        is_regex=is_regex,
        context_size=config["context_size"],
        prefix=config["prefix"],
        postfix=config["postfix"],
        markup_extensions=config["markup_extensions"],
        ignore_case=config["ignore_case"],
    )

    try:
        if path.is_file():
            results = search_in_file(path, query, **common)
        else:
            results = search_in_dir(
                path, query, exclude_patterns=config["exclude_patterns"], **common
            )
    except InvalidQueryError as e:
        return {
            "query": query,
            "path": str(path),
            "total_matches": 0,
            "file_count": 0,
            "results": [],
            "error": str(e),
        }

    return {
        "query": query,
        "path": str(path),
        "total_matches": sum(r.match_count for r in results),
        "file_count": len(results),
        "results": [r.to_dict() for r in results],
        "error": None,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docgrep",
        description="Search a directory tree and print matches with highlighted context",
    )
    parser.add_argument("path", help="Directory or file to search")
    parser.add_argument("query", help="Text to find (a regular expression with -e)")
    parser.add_argument("-e", "--regex", action="store_true",
                        help="Treat query as a regular expression")
    parser.add_argument("-i", "--ignore-case", action="store_true", default=None,
                        help="Case-insensitive search")
    parser.add_argument("-C", "--context", type=int, metavar="BYTES",
                        help="Bytes of context on each side of a match")
    parser.add_argument("--prefix", help="Marker inserted before each match")
    parser.add_argument("--postfix", help="Marker inserted after each match")
    parser.add_argument("--markup-ext", nargs="*", metavar="EXT",
                        help="Extensions whose markup is stripped before searching")
    parser.add_argument("--exclude", action="append", metavar="GLOB",
                        help="Skip entries matching this pattern (repeatable)")
    parser.add_argument("--config", type=Path,
                        help="Config file (default: PATH/.docgrep.json)")
    parser.add_argument("--format", choices=EXPORT_FORMATS, default="json",
                        help="Output format (default: json)")
    parser.add_argument("-o", "--output", help="Write results to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    path = Path(args.path).expanduser()

    try:
        config = load_config(path, args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    # Flags override the config file
    if args.context is not None:
        if args.context < 0:
            print("Error: --context must be >= 0", file=sys.stderr)
            return 2
        config["context_size"] = args.context
    if args.prefix is not None:
        config["prefix"] = args.prefix
    if args.postfix is not None:
        config["postfix"] = args.postfix
    if args.markup_ext is not None:
        config["markup_extensions"] = args.markup_ext
    if args.exclude:
        config["exclude_patterns"] = config["exclude_patterns"] + args.exclude
    if args.ignore_case:
        config["ignore_case"] = True

    result = cmd_search(path, args.query, is_regex=args.regex, config=config)
    if result["error"]:
        print(f"Error: {result['error']}", file=sys.stderr)
        return 2

    exported = cmd_export(result["results"], args.format, args.output, query=args.query)
    if not exported["success"]:
        print(f"Error: {exported['error']}", file=sys.stderr)
        return 2

    if exported["output_path"]:
        logger.info(f"Wrote {exported['char_count']} characters to {exported['output_path']}")
    else:
        print(exported["content"])

    return 0 if result["file_count"] else 1


if __name__ == "__main__":
    sys.exit(main())
