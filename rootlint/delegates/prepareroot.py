"""Read the ostree ``prepare-root.conf`` configuration."""

from __future__ import annotations

import configparser
import logging
from enum import Enum
from typing import Optional

from rootlint.utils.fileio import parse_keyfile
from rootlint.utils.rootfs import RootDir

CONF_PATH = "usr/lib/ostree/prepare-root.conf"

logger = logging.getLogger("rootlint.delegates.prepareroot")


class PrepareRootConfigError(ValueError):
    """prepare-root.conf holds a value that cannot be interpreted."""


class Tristate(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    MAYBE = "maybe"


_TRISTATE_VALUES = {
    "1": Tristate.ENABLED,
    "true": Tristate.ENABLED,
    "yes": Tristate.ENABLED,
    "signed": Tristate.ENABLED,
    "verity": Tristate.ENABLED,
    "0": Tristate.DISABLED,
    "false": Tristate.DISABLED,
    "no": Tristate.DISABLED,
    "maybe": Tristate.MAYBE,
}

# GLib keyfile booleans; matching is case-sensitive.
_BOOLEAN_VALUES = {"1": True, "true": True, "0": False, "false": False}


def load_config_from_root(root: RootDir) -> Optional[configparser.ConfigParser]:
    """Return the parsed config, or ``None`` if the root does not ship one."""

    text = root.read_text_optional(CONF_PATH)
    if text is None:
        return None
    return parse_keyfile(text, source=f"/{CONF_PATH}")


def _tristate(config: configparser.ConfigParser, section: str, key: str) -> Tristate:
    raw = config.get(section, key, fallback=None)
    if raw is None:
        return Tristate.MAYBE
    try:
        return _TRISTATE_VALUES[raw]
    except KeyError:
        raise PrepareRootConfigError(f"Invalid value for {section}.{key}: {raw!r}") from None


def _boolean(config: configparser.ConfigParser, section: str, key: str) -> bool:
    raw = config.get(section, key, fallback=None)
    if raw is None:
        return False
    try:
        return _BOOLEAN_VALUES[raw]
    except KeyError:
        raise PrepareRootConfigError(f"Invalid value for {section}.{key}: {raw!r}") from None


def overlayfs_enabled_in_config(config: configparser.ConfigParser) -> bool:
    """Whether the root will be mounted through an overlay (composefs or transient root)."""

    composefs = _tristate(config, "composefs", "enabled")
    transient = _boolean(config, "root", "transient")
    logger.debug("prepare-root: composefs=%s transient=%s", composefs.value, transient)
    return composefs is not Tristate.DISABLED or transient
