#!/usr/bin/env python3
"""
Export - Render search results as JSON, CSV or Markdown.

Results are the dictionaries produced by FileSearchResult.to_dict():

    {"path": "/docs/a.txt", "matches": ["...<b>hit</b>..."]}
"""

import csv
import io
import json
from pathlib import Path
from typing import Optional

EXPORT_FORMATS = ("json", "csv", "md")


class ExportError(Exception):
    """Base exception for export errors."""
    pass


def _format_json(results: list[dict], pretty: bool = True) -> str:
    """
    Format results as JSON.

    Args:
        results: List of result dictionaries
        pretty: Pretty-print with indentation

    Returns:
        JSON string
    """
    if pretty:
        return json.dumps(results, indent=2, ensure_ascii=False)
    return json.dumps(results, ensure_ascii=False)


def _format_csv(results: list[dict]) -> str:
    """
    Format results as CSV, one row per snippet.

    Columns: path, match_index, snippet
    """
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(["path", "match_index", "snippet"])

    for r in results:
        for i, snippet in enumerate(r.get("matches", []), 1):
            writer.writerow([
                r.get("path", ""),
                i,
                snippet.replace("\n", " ").strip(),
            ])

    return output.getvalue()


def _format_markdown(results: list[dict], query: str = "") -> str:
    """
    Format results as Markdown.

    Args:
        results: List of result dictionaries
        query: Optional query string for header

    Returns:
        Markdown string
    """
    lines = []

    if query:
        lines.append(f"# Search Results: `{query}`\n")
    else:
        lines.append("# Search Results\n")

    total = sum(len(r.get("matches", [])) for r in results)
    lines.append(f"**{total} matches in {len(results)} files**\n")

    for i, r in enumerate(results, 1):
        lines.append(f"## {i}. `{r.get('path', 'unknown')}`")
        lines.append("")
        for snippet in r.get("matches", []):
            lines.append(f"- {snippet.replace(chr(10), ' ').strip()}")
        lines.append("")

    return "\n".join(lines)


def format_results(results: list[dict], format: str = "json", query: str = "") -> str:
    """
    Render results in one of EXPORT_FORMATS ('markdown' is accepted for 'md').

    Raises:
        ExportError: If the format is unknown
    """
    format = format.lower()
    if format == "markdown":
        format = "md"

    if format == "json":
        return _format_json(results)
    elif format == "csv":
        return _format_csv(results)
    elif format == "md":
        return _format_markdown(results, query)

    raise ExportError(f"Invalid format: {format}. Use 'json', 'csv', or 'md'")


def cmd_export(
    results: list[dict],
    format: str = "json",
    output: Optional[str] = None,
    query: str = "",
) -> dict:
    """
    Export search results in specified format.

    Args:
        results: List of result dictionaries from search
        format: Output format - 'json', 'csv', or 'md' (default: json)
        output: Output file path (default: None = return string)
        query: Optional query string for Markdown header

    Returns:
        Dictionary with:
        - success: bool
        - format: str
        - output_path: str or None
        - content: str (if no output path)
        - char_count: int
        - error: str or None
    """
    try:
        content = format_results(results, format, query)
    except ExportError as e:
        return {
            "success": False,
            "format": format,
            "output_path": None,
            "content": "",
            "char_count": 0,
            "error": str(e),
        }

    if not output:
        return {
            "success": True,
            "format": format,
            "output_path": None,
            "content": content,
            "char_count": len(content),
            "error": None,
        }

    output_path = Path(output).expanduser().resolve()
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
    except OSError as e:
        return {
            "success": False,
            "format": format,
            "output_path": str(output_path),
            "content": "",
            "char_count": 0,
            "error": str(e),
        }

    return {
        "success": True,
        "format": format,
        "output_path": str(output_path),
        "content": "",
        "char_count": len(content),
        "error": None,
    }
