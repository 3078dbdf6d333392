"""Locate the kernel shipped under ``/usr/lib/modules``."""

from __future__ import annotations

import logging
import os
import stat
from typing import Optional

from rootlint.utils.rootfs import RootDir

MODULES_DIR = "usr/lib/modules"
KERNEL_IMAGE = b"vmlinuz"

logger = logging.getLogger("rootlint.delegates.kernel")


class MultipleKernelsError(ValueError):
    """More than one kernel directory carries a kernel image."""


def find_kernel_dir(root: RootDir) -> Optional[bytes]:
    """Return the path of the single ``usr/lib/modules/$kver`` holding a kernel.

    Directories without a ``vmlinuz`` image are ignored. Returns ``None``
    when there is no kernel at all.
    """

    modules = root.open_dir_optional(MODULES_DIR)
    if modules is None:
        return None
    found: Optional[bytes] = None
    for entry in modules.entries():
        if not entry.is_dir(follow_symlinks=False):
            continue
        image = RootDir(entry.path).symlink_metadata_optional(KERNEL_IMAGE)
        if image is None or not stat.S_ISREG(image.st_mode):
            continue
        path = os.path.join(os.fsencode(MODULES_DIR), entry.name)
        if found is not None:
            raise MultipleKernelsError(
                f"Found multiple subdirectories in {MODULES_DIR}: "
                f"{os.fsdecode(found)}, {os.fsdecode(path)}"
            )
        found = path
    logger.debug("Found kernel: %r", found)
    return found
