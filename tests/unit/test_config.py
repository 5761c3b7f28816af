"""Unit tests for configuration loading."""

import json

import pytest

from docgrep_lib.config import DEFAULT_CONFIG, ConfigError, load_config, read_ignore_file


def test_defaults_without_files(tmp_path):
    config = load_config(tmp_path)
    assert config == DEFAULT_CONFIG
    # Returned config must not alias the module defaults
    config["exclude_patterns"].append("x")
    assert DEFAULT_CONFIG["exclude_patterns"] == []


def test_config_file_overrides(tmp_path):
    (tmp_path / ".docgrep.json").write_text(json.dumps({
        "context_size": 10,
        "prefix": "[",
        "markup_extensions": ["html"],
    }))
    config = load_config(tmp_path)
    assert config["context_size"] == 10
    assert config["prefix"] == "["
    assert config["postfix"] == "</b>"
    assert config["markup_extensions"] == ["html"]


def test_unknown_keys_ignored(tmp_path):
    (tmp_path / ".docgrep.json").write_text(json.dumps({"colour": "red"}))
    assert "colour" not in load_config(tmp_path)


def test_explicit_config_path(tmp_path):
    other = tmp_path / "custom.json"
    other.write_text(json.dumps({"ignore_case": True}))
    assert load_config(tmp_path, other)["ignore_case"] is True


@pytest.mark.parametrize("content", [
    "{not json",
    "[1, 2]",
    json.dumps({"context_size": "big"}),
    json.dumps({"context_size": True}),
    json.dumps({"context_size": -1}),
    json.dumps({"exclude_patterns": [1]}),
])
def test_invalid_config(tmp_path, content):
    (tmp_path / ".docgrep.json").write_text(content)
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_ignore_file(tmp_path):
    (tmp_path / ".searchignore").write_text("# comment\n\nnode_modules/\n*.log\n")
    assert read_ignore_file(tmp_path) == ["node_modules/", "*.log"]
    assert load_config(tmp_path)["exclude_patterns"] == ["node_modules/", "*.log"]


def test_file_root_uses_parent(tmp_path):
    (tmp_path / ".docgrep.json").write_text(json.dumps({"context_size": 7}))
    target = tmp_path / "a.txt"
    target.write_text("x")
    assert load_config(target)["context_size"] == 7


def test_ignore_file_not_utf8(tmp_path):
    (tmp_path / ".searchignore").write_bytes(b"\xff\xfe*.log\n")
    with pytest.raises(ConfigError):
        read_ignore_file(tmp_path)
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_config_file_not_utf8(tmp_path):
    (tmp_path / ".docgrep.json").write_bytes(b"\xff\xfe{}")
    with pytest.raises(ConfigError):
        load_config(tmp_path)
