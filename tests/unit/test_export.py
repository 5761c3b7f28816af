"""Unit tests for result export formats."""

import csv
import io
import json

from docgrep_lib.export import cmd_export, format_results

RESULTS = [
    {"path": "/docs/a.txt", "matches": ["[hello] w", "d [hello]"]},
    {"path": "/docs/sub/b.html", "matches": ["say [hello]\nthere"]},
]


def test_json():
    assert json.loads(format_results(RESULTS, "json")) == RESULTS


def test_csv_one_row_per_snippet():
    rows = list(csv.reader(io.StringIO(format_results(RESULTS, "csv"))))
    assert rows[0] == ["path", "match_index", "snippet"]
    assert rows[1] == ["/docs/a.txt", "1", "[hello] w"]
    assert rows[2] == ["/docs/a.txt", "2", "d [hello]"]
    assert rows[3] == ["/docs/sub/b.html", "1", "say [hello] there"]


def test_markdown():
    md = format_results(RESULTS, "markdown", query="hello")
    assert md.startswith("# Search Results: `hello`")
    assert "**3 matches in 2 files**" in md
    assert "## 2. `/docs/sub/b.html`" in md
    assert "- say [hello] there" in md


def test_invalid_format():
    result = cmd_export(RESULTS, "xml")
    assert result["success"] is False
    assert "Invalid format" in result["error"]


def test_export_to_file(tmp_path):
    out = tmp_path / "nested" / "results.json"
    result = cmd_export(RESULTS, "json", output=str(out))
    assert result["success"] is True
    assert result["content"] == ""
    assert json.loads(out.read_text(encoding="utf-8")) == RESULTS
