"""Utility helpers for the lint engine."""

from .display import display_path, escape_bytes, quote_bytes
from .fileio import parse_keyfile, parse_toml, read_yaml_file
from .rootfs import PathEscapeError, RootDir
from .walk import FileType, WalkEntry, walk

__all__ = [
    "display_path",
    "escape_bytes",
    "quote_bytes",
    "parse_keyfile",
    "parse_toml",
    "read_yaml_file",
    "PathEscapeError",
    "RootDir",
    "FileType",
    "WalkEntry",
    "walk",
]
