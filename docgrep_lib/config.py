"""
Config - Search defaults, optional per-folder config file and ignore file.

A search root may contain:

    .docgrep.json    - overrides for DEFAULT_CONFIG keys
    .searchignore    - gitignore-style exclude patterns, one per line

Usage:
    from docgrep_lib.config import load_config

    config = load_config(Path("/path/to/folder"))
    config["context_size"]  # 50 unless overridden
"""

import copy
import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".docgrep.json"
IGNORE_FILENAME = ".searchignore"

# Default configuration
DEFAULT_CONFIG = {
    "context_size": 50,
    "prefix": "<b>",
    "postfix": "</b>",
    "markup_extensions": ["html", "htm", "xrtm"],
    "exclude_patterns": [],
    "ignore_case": False,
}

# Expected value type per key
_CONFIG_TYPES = {
    "context_size": int,
    "prefix": str,
    "postfix": str,
    "markup_extensions": list,
    "exclude_patterns": list,
    "ignore_case": bool,
}


class ConfigError(Exception):
    """Config file is malformed or has values of the wrong type."""
    pass


def _validate(key: str, value) -> None:
    expected = _CONFIG_TYPES[key]
    # bool is a subclass of int; a context size of true is still wrong
    if expected is int and isinstance(value, bool):
        raise ConfigError(f"'{key}' must be an integer, got {value!r}")
    if not isinstance(value, expected):
        raise ConfigError(f"'{key}' must be of type {expected.__name__}, got {value!r}")
    if expected is list and not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{key}' must be a list of strings, got {value!r}")
    if key == "context_size" and value < 0:
        raise ConfigError(f"'context_size' must be >= 0, got {value}")


def read_ignore_file(root_path: Path) -> list[str]:
    """
    Read .searchignore from a search root.

    Args:
        root_path: Directory that may contain .searchignore

    Returns:
        List of patterns, or empty list if the file is missing

    Raises:
        ConfigError: If the file exists but cannot be read as UTF-8
    """
    ignore_file = Path(root_path) / IGNORE_FILENAME
    if not ignore_file.is_file():
        return []

    try:
        content = ignore_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {ignore_file}: {e}") from e

    patterns = []
    for line in content.splitlines():
        line = line.strip()
        # Skip comments and empty lines
        if line and not line.startswith("#"):
            patterns.append(line)

    return patterns


def load_config(root_path: Optional[Path] = None, config_path: Optional[Path] = None) -> dict:
    """
    Build the effective configuration for a search.

    Values from the config file override DEFAULT_CONFIG; patterns from
    .searchignore are appended to exclude_patterns. When root_path is a
    file, its parent directory is used.

    Args:
        root_path: Search root to look for .docgrep.json and .searchignore in
        config_path: Explicit config file, used instead of root_path/.docgrep.json

    Returns:
        Configuration dictionary with every DEFAULT_CONFIG key

    Raises:
        ConfigError: If the config file is unreadable, not a JSON object,
            or has values of the wrong type
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    base_dir = None
    if root_path is not None:
        base_dir = Path(root_path)
        if base_dir.is_file():
            base_dir = base_dir.parent

    if config_path is None and base_dir is not None:
        candidate = base_dir / CONFIG_FILENAME
        if candidate.is_file():
            config_path = candidate

    if config_path is not None:
        config_path = Path(config_path)
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot load config {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config {config_path} must contain a JSON object")

        for key, value in data.items():
            if key not in DEFAULT_CONFIG:
                logger.warning(f"Ignoring unknown config key '{key}' in {config_path}")
                continue
            _validate(key, value)
            config[key] = value

    if base_dir is not None:
        config["exclude_patterns"] = config["exclude_patterns"] + read_ignore_file(base_dir)

    return config
