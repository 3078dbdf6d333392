"""Rules that validate boot inputs through their owning subsystems."""

from __future__ import annotations

from rootlint.delegates import kargs, kernel
from rootlint.result import CheckResult, lint_ok
from rootlint.severity import Severity
from rootlint.utils.rootfs import RootDir

from .base import whole_tree_rule


@whole_tree_rule(
    "bootc-kargs",
    Severity.FATAL,
    "Verify syntax of /usr/lib/bootc/kargs.d.",
)
def check_parse_kargs(root: RootDir) -> CheckResult:
    # Parse failures raise and abort the run.
    kargs.get_kargs_in_root(root)
    return lint_ok()


@whole_tree_rule(
    "kernel",
    Severity.FATAL,
    """
    Check for multiple kernels, i.e. multiple directories of the form /usr/lib/modules/$kver.
    Only one kernel is supported in an image.
    """,
)
def check_kernel(root: RootDir) -> CheckResult:
    kernel.find_kernel_dir(root)
    return lint_ok()
