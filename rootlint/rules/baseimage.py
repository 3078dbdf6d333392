"""Rules for ostree-related base image content."""

from __future__ import annotations

import stat

from rootlint.delegates import prepareroot
from rootlint.result import CheckResult, lint_err, lint_ok
from rootlint.severity import Severity
from rootlint.utils.display import quote_bytes
from rootlint.utils.rootfs import RootDir

from .base import whole_tree_rule

# Embedded copy of the expected base image root, shipped as documentation.
BASEIMAGE_REF = "usr/share/doc/bootc/baseimage/base"
OSTREE_LINK_TARGET = b"sysroot/ostree"


def check_prepareroot_composefs_norecurse(root: RootDir) -> CheckResult:
    path = prepareroot.CONF_PATH
    config = prepareroot.load_config_from_root(root)
    if config is None:
        return lint_err(f"{path} is not present to enable composefs")
    if not prepareroot.overlayfs_enabled_in_config(config):
        return lint_err(f"{path} does not have composefs enabled")
    return lint_ok()


@whole_tree_rule(
    "baseimage-composefs",
    Severity.WARNING,
    """
    Check that composefs is enabled for ostree. More in
    <https://ostreedev.github.io/ostree/composefs/>.
    """,
)
def check_composefs(root: RootDir) -> CheckResult:
    violation = check_prepareroot_composefs_norecurse(root)
    if violation is not None:
        return violation
    reference = root.open_dir_optional(BASEIMAGE_REF)
    if reference is not None:
        return check_prepareroot_composefs_norecurse(reference)
    return lint_ok()


def check_baseimage_root_norecurse(root: RootDir) -> CheckResult:
    meta = root.symlink_metadata_optional("sysroot")
    if meta is None:
        return lint_err("Missing /sysroot")
    if not stat.S_ISDIR(meta.st_mode):
        return lint_err("Expected a directory for /sysroot")

    meta = root.symlink_metadata_optional("ostree")
    if meta is None:
        return lint_err("Missing ostree -> sysroot/ostree link")
    if not stat.S_ISLNK(meta.st_mode):
        return lint_err("/ostree should be a symlink")
    link = root.read_link("ostree")
    if link != OSTREE_LINK_TARGET:
        return lint_err(f"Expected /ostree -> {OSTREE_LINK_TARGET.decode()}, not {quote_bytes(link)}")
    return lint_ok()


@whole_tree_rule(
    "baseimage-root",
    Severity.FATAL,
    """
    Check that expected files are present in the root of the filesystem; such
    as /sysroot and a composefs configuration for ostree. More in
    <https://bootc-dev.github.io/bootc/bootc-images.html#standard-image-content>.
    """,
)
def check_baseimage_root(root: RootDir) -> CheckResult:
    violation = check_baseimage_root_norecurse(root)
    if violation is not None:
        return violation
    reference = root.open_dir_optional(BASEIMAGE_REF)
    if reference is not None:
        return check_baseimage_root_norecurse(reference)
    return lint_ok()
