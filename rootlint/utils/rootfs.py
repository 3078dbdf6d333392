"""Read-only handle on a root filesystem tree."""

from __future__ import annotations

import errno
import os
import stat
from typing import List, Optional, Union

PathArg = Union[str, bytes, "os.PathLike[str]", "os.PathLike[bytes]"]

# Same bound the kernel applies to nested symlinks in one lookup.
MAX_SYMLINKS = 40


class PathEscapeError(PermissionError):
    """A lookup below a :class:`RootDir` led outside of it."""


def _components(path: bytes) -> List[bytes]:
    return [part for part in path.split(b"/") if part not in (b"", b".")]


class RootDir:
    """A directory that rules inspect through relative paths.

    Paths are held as bytes so that names which are not valid UTF-8 survive
    unchanged. Relative paths are resolved against this directory only:
    symlinks are followed component by component, and an absolute target or
    a ``..`` that climbs above the directory raises :class:`PathEscapeError`
    rather than reaching host content. A directory opened from a
    ``RootDir`` is confined the same way to itself.
    """

    def __init__(self, path: PathArg) -> None:
        self.path: bytes = os.fsencode(path)

    def __repr__(self) -> str:
        return f"RootDir({self.path!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RootDir):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def resolve(self, rel: PathArg, *, follow: bool = True) -> bytes:
        """Return the host path of ``rel`` with every symlink resolved inside this directory.

        With ``follow`` unset a symlink in the final component is left as is.
        Resolution stops at the first missing component and the remainder is
        appended verbatim, so the eventual system call raises
        :class:`FileNotFoundError` as usual.
        """

        rel_bytes = os.fsencode(rel)
        pending = _components(rel_bytes)
        resolved: List[bytes] = []
        links = 0
        while pending:
            name = pending.pop(0)
            if name == b"..":
                if not resolved:
                    raise PathEscapeError(errno.EACCES, "Path escapes the root", os.fsdecode(rel_bytes))
                resolved.pop()
                continue
            if not pending and not follow:
                resolved.append(name)
                break
            candidate = os.path.join(self.path, *resolved, name)
            try:
                meta = os.lstat(candidate)
            except FileNotFoundError:
                resolved.append(name)
                resolved.extend(pending)
                break
            if not stat.S_ISLNK(meta.st_mode):
                resolved.append(name)
                continue
            links += 1
            if links > MAX_SYMLINKS:
                raise OSError(errno.ELOOP, os.strerror(errno.ELOOP), os.fsdecode(candidate))
            target = os.readlink(candidate)
            if target.startswith(b"/"):
                raise PathEscapeError(
                    errno.EACCES, "Absolute symlink escapes the root", os.fsdecode(candidate)
                )
            pending[:0] = _components(target)
        return os.path.join(self.path, *resolved)

    @property
    def is_running_root(self) -> bool:
        return os.path.realpath(self.path) == b"/"

    def device(self) -> int:
        return os.stat(self.path).st_dev

    def symlink_metadata_optional(self, rel: PathArg) -> Optional[os.stat_result]:
        """``lstat`` ``rel``, or return ``None`` if it does not exist."""

        try:
            return os.lstat(self.resolve(rel, follow=False))
        except FileNotFoundError:
            return None

    def exists(self, rel: PathArg) -> bool:
        return self.symlink_metadata_optional(rel) is not None

    def open_dir(self, rel: PathArg) -> "RootDir":
        path = self.resolve(rel)
        if not stat.S_ISDIR(os.lstat(path).st_mode):
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), os.fsdecode(path))
        return RootDir(path)

    def open_dir_optional(self, rel: PathArg) -> Optional["RootDir"]:
        """Open ``rel`` as a directory, or return ``None`` if it does not exist.

        An existing non-directory raises :class:`NotADirectoryError`.
        """

        try:
            return self.open_dir(rel)
        except FileNotFoundError:
            return None

    def read_link(self, rel: PathArg) -> bytes:
        return os.readlink(self.resolve(rel, follow=False))

    def read_bytes(self, rel: PathArg) -> bytes:
        with open(self.resolve(rel), "rb") as handle:
            return handle.read()

    def read_text(self, rel: PathArg) -> str:
        return self.read_bytes(rel).decode("utf-8")

    def read_text_optional(self, rel: PathArg) -> Optional[str]:
        try:
            return self.read_text(rel)
        except FileNotFoundError:
            return None

    def entries(self) -> List["os.DirEntry[bytes]"]:
        """Return the directory entries sorted by raw name."""

        with os.scandir(self.path) as iterator:
            return sorted(iterator, key=lambda entry: entry.name)
