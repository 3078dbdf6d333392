"""Rules about machine-local state shipped in /var and /etc."""

from __future__ import annotations

from rootlint.delegates import sysusers, tmpfiles
from rootlint.result import CheckResult, format_sample_block, lint_err, lint_ok
from rootlint.severity import RootType, Severity
from rootlint.utils.display import display_path
from rootlint.utils.rootfs import RootDir

from .base import whole_tree_rule


@whole_tree_rule(
    "var-tmpfiles",
    Severity.WARNING,
    """
    Check for content in /var that does not have corresponding systemd tmpfiles.d entries.
    This can cause a problem across upgrades because content in /var from the container
    image will only be applied on the initial provisioning.

    Instead, it's recommended to have /var effectively empty in the container image,
    and use systemd tmpfiles.d to generate empty directories and compatibility symbolic links
    as part of each boot.
    """,
    root_type=RootType.RUNNING,
)
def check_var_tmpfiles(root: RootDir) -> CheckResult:
    result = tmpfiles.find_missing_tmpfiles(root)
    if result.is_empty():
        return lint_ok()
    message = format_sample_block(
        "Found content in /var missing systemd tmpfiles.d entries:", result.tmpfiles
    )
    message += format_sample_block(
        "Found non-directory/non-symlink files in /var:",
        (display_path(path) for path in result.unsupported),
    )
    return lint_err(message)


@whole_tree_rule(
    "sysusers",
    Severity.WARNING,
    """
    Check for users in /etc/passwd and groups in /etc/group that do not have corresponding
    systemd sysusers.d entries in /usr/lib/sysusers.d.
    This can cause a problem across upgrades because if /etc is not transient and is locally
    modified (commonly due to local user additions), then the contents of /etc/passwd in the new container
    image may not be visible.

    Using systemd-sysusers to allocate users and groups will ensure that these are allocated
    on system startup alongside other users.

    More on this topic in <https://bootc-dev.github.io/bootc/building/users-and-groups.html>
    """,
)
def check_sysusers(root: RootDir) -> CheckResult:
    result = sysusers.analyze(root)
    if result.is_empty():
        return lint_ok()
    message = format_sample_block(
        "Found /etc/passwd entry without corresponding systemd sysusers.d:", result.missing_users
    )
    message += format_sample_block(
        "Found /etc/group entry without corresponding systemd sysusers.d:", result.missing_groups
    )
    return lint_err(message)
