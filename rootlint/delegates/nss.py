"""Minimal readers for ``passwd`` and ``group`` databases inside a root."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from rootlint.utils.rootfs import RootDir


@dataclass(frozen=True)
class NssEntry:
    name: str
    id: int


def parse_nss_database(text: str) -> List[NssEntry]:
    """Parse ``name:x:id:...`` lines; malformed lines raise ``ValueError``."""

    entries: List[NssEntry] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split(":")
        if len(fields) < 3:
            raise ValueError(f"line {lineno}: expected at least 3 fields, found {len(fields)}")
        try:
            ident = int(fields[2])
        except ValueError:
            raise ValueError(f"line {lineno}: invalid id {fields[2]!r}") from None
        entries.append(NssEntry(fields[0], ident))
    return entries


def load_nss_database(root: RootDir, rel: str) -> List[NssEntry]:
    """Read ``rel`` from ``root``; a missing file is an empty database."""

    text = root.read_text_optional(rel)
    if text is None:
        return []
    try:
        return parse_nss_database(text)
    except ValueError as exc:
        raise ValueError(f"Parsing /{rel}: {exc}") from exc


def id_names(root: RootDir, *databases: str) -> Dict[int, str]:
    """Map numeric ids to names; earlier databases win."""

    names: Dict[int, str] = {}
    for rel in databases:
        for entry in load_nss_database(root, rel):
            names.setdefault(entry.id, entry.name)
    return names
