"""Single-pass filesystem traversal that never follows symlinks."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List

from .rootfs import RootDir


class FileType(str, Enum):
    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"

    @classmethod
    def of(cls, entry: "os.DirEntry[bytes]") -> "FileType":
        if entry.is_symlink():
            return cls.SYMLINK
        if entry.is_dir(follow_symlinks=False):
            return cls.DIRECTORY
        if entry.is_file(follow_symlinks=False):
            return cls.REGULAR
        return cls.OTHER


@dataclass
class WalkEntry:
    """One visited node; only valid for the iteration that produced it."""

    path: bytes
    filename: bytes
    file_type: FileType
    dir: RootDir
    _dirent: "os.DirEntry[bytes]" = field(repr=False, compare=False)

    @property
    def parent(self) -> bytes:
        return os.path.dirname(self.path)

    def metadata(self) -> os.stat_result:
        return self._dirent.stat(follow_symlinks=False)

    def read_link(self) -> bytes:
        return self.dir.read_link(self.filename)


@dataclass
class _Frame:
    dir: RootDir
    path: bytes
    pending: Iterator["os.DirEntry[bytes]"]


def walk(root: RootDir, *, noxdev: bool = True, path_base: bytes = b"/") -> Iterator[WalkEntry]:
    """Yield every node below ``root`` exactly once, depth first.

    Entries of a directory are yielded in byte order of their names and a
    directory's children follow it directly. Symlinks are yielded as leaves
    and never descended into, so self-referential, looping, broken or
    escaping links all terminate. With ``noxdev``, directories on another
    device are yielded but not descended into.

    The consumer stops the traversal by leaving the loop.
    """

    root_dev = root.device()
    stack: List[_Frame] = [_Frame(root, path_base, iter(root.entries()))]
    while stack:
        frame = stack[-1]
        dirent = next(frame.pending, None)
        if dirent is None:
            stack.pop()
            continue
        entry = WalkEntry(
            path=os.path.join(frame.path, dirent.name),
            filename=dirent.name,
            file_type=FileType.of(dirent),
            dir=frame.dir,
            _dirent=dirent,
        )
        yield entry
        if entry.file_type is not FileType.DIRECTORY:
            continue
        if noxdev and entry.metadata().st_dev != root_dev:
            continue
        child = RootDir(os.path.join(frame.dir.path, dirent.name))
        stack.append(_Frame(child, entry.path, iter(child.entries())))
