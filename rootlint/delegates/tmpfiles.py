"""Find ``/var`` content that systemd tmpfiles.d does not account for."""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from typing import Dict, List, Set

from rootlint.utils.display import escape_bytes
from rootlint.utils.rootfs import RootDir
from rootlint.utils.walk import FileType, walk

from .nss import id_names

TMPFILES_DIRS = ("usr/lib/tmpfiles.d", "etc/tmpfiles.d")
# A symlink to /dev/null masks a drop-in of the same name.
MASKED_TARGET = b"/dev/null"
VAR_DIR = b"var"

logger = logging.getLogger("rootlint.delegates.tmpfiles")


@dataclass
class TmpfilesResult:
    # Suggested tmpfiles.d lines for directories and symlinks lacking an entry.
    tmpfiles: List[str] = field(default_factory=list)
    # Paths in /var that tmpfiles.d cannot express (regular files, sockets...).
    unsupported: List[bytes] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.tmpfiles and not self.unsupported


def parse_tmpfiles_paths(text: str) -> Set[bytes]:
    """Return every path a tmpfiles.d snippet declares."""

    paths: Set[bytes] = set()
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split()
        if len(fields) < 2:
            continue
        paths.add(os.fsencode(os.path.normpath(fields[1])))
    return paths


def read_tmpfiles_paths(root: RootDir) -> Set[bytes]:
    """Collect declared paths from every ``*.conf`` in the tmpfiles.d directories."""

    paths: Set[bytes] = set()
    for rel in TMPFILES_DIRS:
        directory = root.open_dir_optional(rel)
        if directory is None:
            continue
        for entry in directory.entries():
            if not entry.name.endswith(b".conf"):
                continue
            if entry.is_symlink() and directory.read_link(entry.name) == MASKED_TARGET:
                continue
            paths |= parse_tmpfiles_paths(directory.read_text(entry.name))
    return paths


def _covered(declared: Set[bytes]) -> Set[bytes]:
    """Declared paths plus all of their ancestors, which tmpfiles creates too."""

    covered: Set[bytes] = set()
    for path in declared:
        while path not in (b"/", b""):
            covered.add(path)
            path = os.path.dirname(path)
    return covered


def _owner(ids: Dict[int, str], ident: int) -> str:
    return ids.get(ident, str(ident))


def find_missing_tmpfiles(root: RootDir) -> TmpfilesResult:
    """Walk ``/var`` and report what would not be recreated on a fresh boot."""

    result = TmpfilesResult()
    var = root.open_dir_optional(VAR_DIR)
    if var is None:
        return result
    covered = _covered(read_tmpfiles_paths(root))
    users = id_names(root, "etc/passwd", "usr/lib/passwd")
    groups = id_names(root, "etc/group", "usr/lib/group")

    for entry in walk(var, path_base=b"/var"):
        if entry.path in covered:
            continue
        display = escape_bytes(entry.path)
        if entry.file_type is FileType.DIRECTORY:
            meta = entry.metadata()
            result.tmpfiles.append(
                f"d {display} {stat.S_IMODE(meta.st_mode):04o} "
                f"{_owner(users, meta.st_uid)} {_owner(groups, meta.st_gid)} - -"
            )
        elif entry.file_type is FileType.SYMLINK:
            result.tmpfiles.append(f"L {display} - - - - {escape_bytes(entry.read_link())}")
        else:
            result.unsupported.append(entry.path)
    logger.debug(
        "tmpfiles: %d missing entries, %d unsupported paths",
        len(result.tmpfiles),
        len(result.unsupported),
    )
    return result
