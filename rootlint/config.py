"""Optional YAML configuration for lint runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, Optional

import yaml

from .severity import WarningDisposition
from .utils.fileio import read_yaml_file

KNOWN_KEYS = frozenset({"skip", "fatal-warnings"})


class ConfigError(ValueError):
    """The configuration file is malformed."""


@dataclass(frozen=True)
class LintConfig:
    skip: FrozenSet[str] = field(default_factory=frozenset)
    fatal_warnings: bool = False

    @property
    def warning_disposition(self) -> WarningDisposition:
        if self.fatal_warnings:
            return WarningDisposition.FATAL_WARNINGS
        return WarningDisposition.ALLOW_WARNINGS

    def merged(self, skip: Iterable[str] = (), fatal_warnings: bool = False) -> "LintConfig":
        """Overlay command-line choices: skip sets are unioned, flags can only turn on."""

        return LintConfig(
            skip=self.skip | frozenset(skip),
            fatal_warnings=self.fatal_warnings or fatal_warnings,
        )


def load_config(path: Optional[Path]) -> LintConfig:
    """Load ``path``; ``None`` yields the defaults, a missing file is an error."""

    if path is None:
        return LintConfig()
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = read_yaml_file(path)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return LintConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config at {path} is not a mapping")

    unknown = sorted(str(key) for key in set(data) - KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {', '.join(unknown)}")

    skip = data.get("skip", [])
    if isinstance(skip, str):
        skip = [skip]
    if not isinstance(skip, list) or not all(isinstance(name, str) for name in skip):
        raise ConfigError(f"'skip' in {path} must be a list of rule names")

    fatal_warnings = data.get("fatal-warnings", False)
    if not isinstance(fatal_warnings, bool):
        raise ConfigError(f"'fatal-warnings' in {path} must be a boolean")

    return LintConfig(skip=frozenset(skip), fatal_warnings=fatal_warnings)
