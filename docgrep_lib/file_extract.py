#!/usr/bin/env python3
"""
File Extraction - Turn a file into the text that gets searched.

Handles:
- Markup files (.html, .htm, .xrtm by default) - tags stripped, see markup.py
- Plain text files - decoded trying several encodings
- Word documents (.docx) - paragraphs and tables
- Excel spreadsheets (.xlsx) - cell values from every sheet
- PDF files (.pdf) - text of every page

Binary files are rejected by extension or by a NUL byte near the start.
Every failure is raised as FileUnreadableError; the directory walker logs
it and moves on.
"""

import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from docgrep_lib.markup import strip_markup, tags_for_extension
from docgrep_lib.matching import SearchError

# Configure module logger
logger = logging.getLogger(__name__)

# Document types requiring special handling
DOCX_EXTENSIONS = {'docx'}
XLSX_EXTENSIONS = {'xlsx'}
PDF_EXTENSIONS = {'pdf'}

# Never searched
BINARY_EXTENSIONS = {
    'exe', 'dll', 'so', 'dylib', 'bin', 'dat',
    'zip', 'tar', 'gz', 'bz2', 'xz', '7z', 'rar',
    'jpg', 'jpeg', 'png', 'gif', 'bmp', 'ico', 'webp',
    'mp3', 'mp4', 'avi', 'mov', 'wav', 'flac', 'ogg',
    'ttf', 'otf', 'woff', 'woff2', 'eot',
    'pyc', 'pyo', 'class', 'o', 'obj',
    'db', 'sqlite', 'sqlite3',
}

# Text encodings to try (in order). utf-8-sig also reads plain UTF-8 and
# drops a leading BOM; latin-1 decodes anything, so it is last.
TEXT_ENCODINGS = ['utf-8-sig', 'cp1252', 'latin-1']

# Bytes inspected when sniffing for binary content
SNIFF_BYTES = 8192


class FileUnreadableError(SearchError):
    """File could not be opened, read or decoded."""
    pass


class BinaryFileError(FileUnreadableError):
    """File holds binary data and is not searched."""
    pass


def file_extension(filepath: Path) -> str:
    """Lowercase extension without the dot ('' when there is none)."""
    return filepath.suffix.lower().lstrip('.')


def normalize_extensions(extensions: Optional[Iterable[str]]) -> set[str]:
    """Normalize '.HTML', 'html' and ' Html ' to 'html'."""
    if not extensions:
        return set()
    return {ext.strip().lower().lstrip('.') for ext in extensions if ext.strip()}


def classify_file(filepath: Path, markup_extensions: Iterable[str] = ()) -> str:
    """
    Classify a file by extension.

    Args:
        filepath: Path to the file
        markup_extensions: Extensions treated as markup (normalized or not)

    Returns:
        'markup', 'docx', 'xlsx', 'pdf', 'binary' or 'text'
    """
    ext = file_extension(filepath)

    if ext and ext in normalize_extensions(markup_extensions):
        return 'markup'
    elif ext in DOCX_EXTENSIONS:
        return 'docx'
    elif ext in XLSX_EXTENSIONS:
        return 'xlsx'
    elif ext in PDF_EXTENSIONS:
        return 'pdf'
    elif ext in BINARY_EXTENSIONS:
        return 'binary'
    return 'text'


def _read_bytes(filepath: Path) -> bytes:
    try:
        return filepath.read_bytes()
    except OSError as e:
        raise FileUnreadableError(f"Failed to read {filepath}: {e}") from e


def decode_text(raw: bytes, filepath: Path) -> str:
    """
    Decode raw file content, trying TEXT_ENCODINGS in order.

    Args:
        raw: File content
        filepath: Path used in error messages

    Returns:
        Decoded text

    Raises:
        FileUnreadableError: If the content looks binary
    """
    if b'\x00' in raw[:SNIFF_BYTES]:
        raise BinaryFileError(f"Skipping binary file: {filepath}")

    for encoding in TEXT_ENCODINGS:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue

    raise FileUnreadableError(f"Could not decode {filepath} with any known encoding")


def _extract_docx(filepath: Path) -> str:
    """
    Extract paragraphs and tables from a Word document.

    Table rows are rendered as cells joined by ' | '.
    """
    try:
        from docx import Document
    except ImportError as e:
        raise FileUnreadableError("python-docx not installed. Install with: pip install python-docx") from e

    try:
        doc = Document(str(filepath))
        parts = [para.text.strip() for para in doc.paragraphs if para.text.strip()]

        for table in doc.tables:
            rows = [' | '.join(cell.text.strip() for cell in row.cells) for row in table.rows]
            if rows:
                parts.append('\n'.join(rows))
    except Exception as e:
        raise FileUnreadableError(f"Failed to extract from docx {filepath}: {e}") from e

    return '\n\n'.join(parts)


def _extract_xlsx(filepath: Path) -> str:
    """Extract cell values from every sheet of a workbook."""
    try:
        from openpyxl import load_workbook
    except ImportError as e:
        raise FileUnreadableError("openpyxl not installed. Install with: pip install openpyxl") from e

    try:
        wb = load_workbook(filepath, read_only=True, data_only=True)
    except Exception as e:
        raise FileUnreadableError(f"Failed to open xlsx {filepath}: {e}") from e

    parts = []
    try:
        for sheet in wb.worksheets:
            rows = []
            for row in sheet.iter_rows(values_only=True):
                values = ['' if value is None else str(value) for value in row]
                if any(values):
                    rows.append(' | '.join(values))
            if rows:
                parts.append('\n'.join([f"## Sheet: {sheet.title}"] + rows))
    except Exception as e:
        raise FileUnreadableError(f"Failed to extract from xlsx {filepath}: {e}") from e
    finally:
        wb.close()

    return '\n\n'.join(parts)


def _extract_pdf(filepath: Path) -> str:
    """Extract text page by page."""
    try:
        from PyPDF2 import PdfReader
    except ImportError as e:
        raise FileUnreadableError("PyPDF2 not installed. Install with: pip install PyPDF2") from e

    try:
        reader = PdfReader(str(filepath))
        pages = [page.extract_text() or '' for page in reader.pages]
    except Exception as e:
        raise FileUnreadableError(f"Failed to extract from pdf {filepath}: {e}") from e

    return '\n\n'.join(text.strip() for text in pages if text.strip())


def extract_text(filepath: Path, markup_extensions: Iterable[str] = ()) -> str:
    """
    Extract the searchable text of a single file.

    Args:
        filepath: Path to the file
        markup_extensions: Extensions whose content is stripped of markup

    Returns:
        Extracted text (possibly empty)

    Raises:
        FileUnreadableError: If the file cannot be read, is binary, or the
            document library fails on it
    """
    filepath = Path(filepath)
    file_type = classify_file(filepath, markup_extensions)

    if file_type == 'binary':
        raise BinaryFileError(f"Skipping binary file: {filepath}")
    elif file_type == 'docx':
        return _extract_docx(filepath)
    elif file_type == 'xlsx':
        return _extract_xlsx(filepath)
    elif file_type == 'pdf':
        return _extract_pdf(filepath)

    text = decode_text(_read_bytes(filepath), filepath)

    if file_type == 'markup':
        return strip_markup(text, tags_for_extension(file_extension(filepath)))
    return text


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Print the searchable text of a file')
    parser.add_argument('path', help='File to extract')
    parser.add_argument('--markup-ext', nargs='*', default=['html', 'htm', 'xrtm'],
                        help='Extensions treated as markup')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')

    path = Path(args.path)
    try:
        content = extract_text(path, args.markup_ext)
    except FileUnreadableError as e:
        print(f"Could not extract content from {path}: {e}")
        sys.exit(1)

    print(f"File: {path.resolve()}")
    print(f"Type: {classify_file(path, args.markup_ext)}")
    print(f"Content preview: {content[:200]}...")
