"""Reconcile ``/etc/passwd`` and ``/etc/group`` against systemd sysusers.d."""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from typing import List, Set, Tuple

from rootlint.utils.rootfs import RootDir

from .nss import load_nss_database

SYSUSERS_DIRS = ("usr/lib/sysusers.d", "etc/sysusers.d")
# A symlink to /dev/null masks a drop-in of the same name.
MASKED_TARGET = b"/dev/null"
# Always created by the base filesystem, never by sysusers.
BUILTIN_NAMES = frozenset({"root"})

logger = logging.getLogger("rootlint.delegates.sysusers")


@dataclass
class SysusersResult:
    missing_users: List[str] = field(default_factory=list)
    missing_groups: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.missing_users and not self.missing_groups


def parse_sysusers(text: str) -> Tuple[Set[str], Set[str]]:
    """Return the ``(users, groups)`` a sysusers.d snippet declares.

    ``u`` lines declare a user and a group of the same name; ``g`` lines
    declare a group; ``m`` lines add a membership and declare neither.
    """

    users: Set[str] = set()
    groups: Set[str] = set()
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            fields = shlex.split(line)
        except ValueError as exc:
            raise ValueError(f"line {lineno}: {exc}") from exc
        if len(fields) < 2:
            raise ValueError(f"line {lineno}: expected a type and a name")
        kind, name = fields[0], fields[1]
        if kind.startswith("u"):
            users.add(name)
            groups.add(name)
        elif kind == "g":
            groups.add(name)
    return users, groups


def read_sysusers(root: RootDir) -> Tuple[Set[str], Set[str]]:
    users: Set[str] = set()
    groups: Set[str] = set()
    for rel in SYSUSERS_DIRS:
        directory = root.open_dir_optional(rel)
        if directory is None:
            continue
        for entry in directory.entries():
            if not entry.name.endswith(b".conf"):
                continue
            if entry.is_symlink() and directory.read_link(entry.name) == MASKED_TARGET:
                continue
            try:
                new_users, new_groups = parse_sysusers(directory.read_text(entry.name))
            except ValueError as exc:
                raise ValueError(f"Parsing /{rel}/{entry.name.decode('utf-8', 'replace')}: {exc}") from exc
            users |= new_users
            groups |= new_groups
    return users, groups


def analyze(root: RootDir) -> SysusersResult:
    """Find passwd/group entries that sysusers.d would not recreate.

    Entries also present in the immutable ``/usr/lib/passwd`` and
    ``/usr/lib/group`` databases are fine.
    """

    declared_users, declared_groups = read_sysusers(root)
    static_users = {entry.name for entry in load_nss_database(root, "usr/lib/passwd")}
    static_groups = {entry.name for entry in load_nss_database(root, "usr/lib/group")}

    known_users = declared_users | static_users | BUILTIN_NAMES
    known_groups = declared_groups | static_groups | BUILTIN_NAMES
    result = SysusersResult(
        missing_users=sorted(
            {entry.name for entry in load_nss_database(root, "etc/passwd")} - known_users
        ),
        missing_groups=sorted(
            {entry.name for entry in load_nss_database(root, "etc/group")} - known_groups
        ),
    )
    logger.debug(
        "sysusers: %d missing users, %d missing groups",
        len(result.missing_users),
        len(result.missing_groups),
    )
    return result
