"""Rules about the basic layout of the root filesystem."""

from __future__ import annotations

import os
import stat
from typing import List

from rootlint.result import CheckResult, and_more_suffix, lint_err, lint_ok
from rootlint.severity import RootType, Severity
from rootlint.utils.display import display_path, quote_bytes
from rootlint.utils.rootfs import RootDir

from .base import whole_tree_rule

# https://systemd.io/API_FILE_SYSTEMS/ with /var added
API_DIRS = ("dev", "proc", "sys", "run", "tmp", "var")
RUNTIME_INJECTED = ("etc/hostname", "etc/resolv.conf")


@whole_tree_rule(
    "var-run",
    Severity.FATAL,
    "Check for /var/run being a physical directory; this is always a bug.",
)
def check_var_run(root: RootDir) -> CheckResult:
    meta = root.symlink_metadata_optional("var/run")
    if meta is not None and not stat.S_ISLNK(meta.st_mode):
        return lint_err("Not a symlink: var/run")
    return lint_ok()


# /etc/hostname is expected to be injected into a running root.
@whole_tree_rule(
    "buildah-injected",
    Severity.WARNING,
    """
    Check for an invalid /etc/hostname or /etc/resolv.conf that may have been injected by
    a container build system.
    """,
    root_type=RootType.ALTERNATIVE,
)
def check_buildah_injected(root: RootDir) -> CheckResult:
    for rel in RUNTIME_INJECTED:
        meta = root.symlink_metadata_optional(rel)
        if meta is not None and stat.S_ISREG(meta.st_mode) and meta.st_size == 0:
            return lint_err(
                f"/{rel} is an empty file; this may have been synthesized by a container runtime."
            )
    return lint_ok()


@whole_tree_rule(
    "etc-usretc",
    Severity.FATAL,
    """
    Verify that only one of /etc or /usr/etc exist. You should only have /etc
    in a container image. It will cause undefined behavior to have both /etc
    and /usr/etc.
    """,
)
def check_usretc(root: RootDir) -> CheckResult:
    # A root without /etc at all is tolerated.
    if not root.exists("etc"):
        return lint_ok()
    if root.exists("usr/etc"):
        return lint_err(
            "Found /usr/etc - this is a bootc implementation detail and not supported to use in containers"
        )
    return lint_ok()


@whole_tree_rule(
    "api-base-directories",
    Severity.FATAL,
    """
    Verify that expected base API directories exist. For more information
    on these, see <https://systemd.io/API_FILE_SYSTEMS/>.

    Note that in addition, bootc requires that `/var` exist as a directory.
    """,
)
def check_api_dirs(root: RootDir) -> CheckResult:
    for name in API_DIRS:
        meta = root.symlink_metadata_optional(name)
        if meta is None:
            return lint_err(f"Missing API filesystem base directory: /{name}")
        if not stat.S_ISDIR(meta.st_mode):
            return lint_err(f"Expected directory for API filesystem base directory: /{name}")
    return lint_ok()


def _path_key(path: bytes) -> List[bytes]:
    return path.split(b"/")


def collect_nonempty_regfiles(directory: RootDir, path: bytes, out: List[bytes]) -> None:
    """Append every non-empty regular file below ``directory``; symlinks are ignored."""

    for entry in directory.entries():
        child = os.path.join(path, entry.name)
        if entry.is_file(follow_symlinks=False):
            if entry.stat(follow_symlinks=False).st_size > 0:
                out.append(child)
        elif entry.is_dir(follow_symlinks=False):
            collect_nonempty_regfiles(RootDir(entry.path), child, out)


@whole_tree_rule(
    "var-log",
    Severity.WARNING,
    """
    Check for non-empty regular files in `/var/log`. It is often undesired
    to ship log files in container images. Log files in general are usually
    per-machine state in `/var`. Additionally, log files often include
    timestamps, causing unreproducible container images, and may contain
    sensitive build system information.
    """,
)
def check_varlog(root: RootDir) -> CheckResult:
    log_dir = root.open_dir_optional("var/log")
    if log_dir is None:
        return lint_ok()
    nonempty: List[bytes] = []
    collect_nonempty_regfiles(log_dir, b"/var/log", nonempty)
    if not nonempty:
        return lint_ok()
    nonempty.sort(key=_path_key)
    first = display_path(nonempty[0])
    return lint_err(f"Found non-empty logfile: {first}{and_more_suffix(len(nonempty) - 1)}")


@whole_tree_rule(
    "nonempty-boot",
    Severity.WARNING,
    """
    The `/boot` directory should be present, but empty. The kernel
    content should be in /usr/lib/modules instead in the container image.
    Any content here in the container image will be masked at runtime.
    """,
)
def check_boot(root: RootDir) -> CheckResult:
    boot = root.open_dir_optional("boot")
    if boot is None:
        return lint_err("Missing /boot directory")
    entries = boot.entries()
    if not entries:
        return lint_ok()
    first = quote_bytes(entries[0].name)
    return lint_err(f"Found non-empty /boot: {first}{and_more_suffix(len(entries) - 1)}")
