"""Per-node rule rejecting names that are not valid UTF-8."""

from __future__ import annotations

from rootlint.result import CheckResult, lint_err, lint_ok
from rootlint.severity import Severity
from rootlint.utils.display import display_path, quote_bytes
from rootlint.utils.walk import FileType, WalkEntry

from .base import per_node_rule


def _is_utf8(raw: bytes) -> bool:
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


# See https://github.com/bootc-dev/bootc/issues/975 for lifting this.
@per_node_rule(
    "utf8",
    Severity.FATAL,
    """
    Check for non-UTF8 filenames. Currently, the ostree backend of bootc only supports
    UTF-8 filenames. Non-UTF8 filenames will cause a fatal error.
    """,
)
def check_utf8(entry: WalkEntry) -> CheckResult:
    # The name is checked before the symlink target, so a bad name wins.
    if not _is_utf8(entry.filename):
        return lint_err(
            f"{display_path(entry.parent)}: Found non-utf8 filename {quote_bytes(entry.filename)}"
        )
    if entry.file_type is FileType.SYMLINK and not _is_utf8(entry.read_link()):
        return lint_err(f"{display_path(entry.path)}: Found non-utf8 symlink target")
    return lint_ok()
