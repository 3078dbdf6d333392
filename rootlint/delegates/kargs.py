"""Parse kernel argument drop-ins from ``/usr/lib/bootc/kargs.d``."""

from __future__ import annotations

import logging
import os
import platform
import tomllib
from typing import Any, Dict, List, Optional

from rootlint.utils.fileio import parse_toml
from rootlint.utils.rootfs import RootDir

KARGS_DIR = "usr/lib/bootc/kargs.d"
KARGS_SUFFIX = b".toml"
ALLOWED_KEYS = frozenset({"kargs", "match-architectures"})

logger = logging.getLogger("rootlint.delegates.kargs")


class KargsParseError(ValueError):
    """A kargs.d file is not valid."""


def host_arch() -> str:
    return platform.machine()


def _string_list(data: Dict[str, Any], key: str, source: str) -> Optional[List[str]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise KargsParseError(f"{source}: '{key}' must be an array of strings")
    return value


def parse_kargs_toml(data: bytes, arch: str, source: str = "<kargs>") -> List[str]:
    """Return the kernel arguments a single file contributes on ``arch``."""

    try:
        document = parse_toml(data)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise KargsParseError(f"Parsing {source}: {exc}") from exc
    unknown = sorted(set(document) - ALLOWED_KEYS)
    if unknown:
        raise KargsParseError(f"{source}: unknown field(s): {', '.join(unknown)}")
    kargs = _string_list(document, "kargs", source)
    if kargs is None:
        raise KargsParseError(f"{source}: missing field 'kargs'")
    architectures = _string_list(document, "match-architectures", source)
    if architectures is not None and arch not in architectures:
        return []
    return kargs


def get_kargs_in_root(root: RootDir, arch: Optional[str] = None) -> List[str]:
    """Collect kernel arguments from every ``*.toml`` file, in name order.

    A missing directory yields no arguments; a ``kargs.d`` that is not a
    directory raises :class:`NotADirectoryError`.
    """

    arch = arch or host_arch()
    kargs_dir = root.open_dir_optional(KARGS_DIR)
    if kargs_dir is None:
        return []
    kargs: List[str] = []
    for entry in kargs_dir.entries():
        if not entry.name.endswith(KARGS_SUFFIX) or not entry.is_file(follow_symlinks=False):
            continue
        source = f"/{KARGS_DIR}/{os.fsdecode(entry.name)}"
        kargs.extend(parse_kargs_toml(kargs_dir.read_bytes(entry.name), arch, source))
    logger.debug("found kargs: %s", kargs)
    return kargs
