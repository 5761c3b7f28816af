"""
Docgrep Library - Recursive document search with highlighted snippets.

Searches every file under a directory for a literal or regex query and
returns the matches with surrounding context, markup stripped from
HTML-like files.

Modules:
    text_slice   - UTF-8 boundary-safe byte slicing
    matching     - Query compilation, match spans and snippet wrapping
    markup       - HTML-like tag stripping
    file_extract - Extract searchable text from all file types
    search       - Directory walk and per-file results
    export       - JSON, CSV and Markdown output
    config       - Defaults, .docgrep.json and .searchignore
    cli          - Command line entry point
"""

__version__ = "1.0.0"
__all__ = []
