"""Basic file parsing helpers."""

from __future__ import annotations

import configparser
import tomllib
from pathlib import Path
from typing import Any, Dict

import yaml


def read_yaml_file(path: Path) -> Any:
    """Return the parsed YAML if the file exists, otherwise ``None``."""

    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def parse_toml(data: bytes) -> Dict[str, Any]:
    """Parse TOML bytes; raises :class:`tomllib.TOMLDecodeError` or ``UnicodeDecodeError``."""

    return tomllib.loads(data.decode("utf-8"))


def parse_keyfile(text: str, source: str = "<keyfile>") -> configparser.ConfigParser:
    """Parse a GLib-style ``[group]`` / ``key = value`` file."""

    parser = configparser.ConfigParser(interpolation=None, comment_prefixes=("#",), strict=False)
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    parser.read_string(text, source=source)
    return parser
