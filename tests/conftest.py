"""
Fixtures shared across the rootlint tests.
"""

import pytest

from rootlint.rules.filesystem import API_DIRS
from rootlint.utils.rootfs import RootDir

PREPAREROOT_CONF = "[composefs]\nenabled = true\n"


def build_passing_root(path):
    """Populate ``path`` with a root that every built-in rule accepts."""

    for name in API_DIRS:
        (path / name).mkdir()
    kernel_dir = path / "usr/lib/modules/5.7.2"
    kernel_dir.mkdir(parents=True)
    (kernel_dir / "vmlinuz").write_text("vmlinuz")
    (path / "boot").mkdir()
    (path / "sysroot").mkdir()
    (path / "ostree").symlink_to("sysroot/ostree")
    conf = path / "usr/lib/ostree/prepare-root.conf"
    conf.parent.mkdir(parents=True)
    conf.write_text(PREPAREROOT_CONF)
    return path


@pytest.fixture
def empty_root(tmp_path):
    root_path = tmp_path / "root"
    root_path.mkdir()
    return root_path


@pytest.fixture
def passing_root(tmp_path):
    root_path = tmp_path / "passing"
    root_path.mkdir()
    return build_passing_root(root_path)


@pytest.fixture
def passing_rootdir(passing_root):
    return RootDir(passing_root)
