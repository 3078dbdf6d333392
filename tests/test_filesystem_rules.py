import pytest

from rootlint.rules.filesystem import (
    check_api_dirs,
    check_boot,
    check_buildah_injected,
    check_usretc,
    check_var_run,
    check_varlog,
)
from rootlint.utils.rootfs import PathEscapeError, RootDir


def test_var_run(empty_root):
    root = RootDir(empty_root)
    assert check_var_run(root) is None

    (empty_root / "var/run/foo").mkdir(parents=True)
    violation = check_var_run(root)
    assert violation is not None
    assert "var/run" in violation.message

    (empty_root / "var/run/foo").rmdir()
    (empty_root / "var/run").rmdir()
    assert check_var_run(root) is None

    (empty_root / "var/run").symlink_to("../run")
    assert check_var_run(root) is None


def test_api_dirs(passing_root):
    root = RootDir(passing_root)
    assert check_api_dirs(root) is None

    (passing_root / "var").rmdir()
    assert str(check_api_dirs(root)) == "Missing API filesystem base directory: /var"

    (passing_root / "var").write_text("a file for var")
    assert str(check_api_dirs(root)) == "Expected directory for API filesystem base directory: /var"


def test_usr_etc(empty_root):
    root = RootDir(empty_root)
    assert check_usretc(root) is None

    (empty_root / "etc").mkdir()
    (empty_root / "usr/etc").mkdir(parents=True)
    assert check_usretc(root) is not None

    (empty_root / "etc").rmdir()
    assert check_usretc(root) is None


def test_buildah_injected(empty_root):
    root = RootDir(empty_root)
    (empty_root / "etc").mkdir()
    assert check_buildah_injected(root) is None

    (empty_root / "etc/hostname").write_bytes(b"")
    assert str(check_buildah_injected(root)) == (
        "/etc/hostname is an empty file; this may have been synthesized by a container runtime."
    )

    (empty_root / "etc/hostname").write_bytes(b"some static hostname")
    assert check_buildah_injected(root) is None

    (empty_root / "etc/resolv.conf").write_bytes(b"")
    assert "/etc/resolv.conf" in str(check_buildah_injected(root))


def test_varlog(empty_root):
    root = RootDir(empty_root)
    assert check_varlog(root) is None

    (empty_root / "var/log").mkdir(parents=True)
    assert check_varlog(root) is None

    (empty_root / "var/log/README").symlink_to("../../usr/share/doc/systemd/README.logs")
    (empty_root / "var/log/empty.log").write_text("")
    assert check_varlog(root) is None

    (empty_root / "var/log/somefile.log").write_text("log contents")
    assert str(check_varlog(root)) == "Found non-empty logfile: /var/log/somefile.log"

    (empty_root / "var/log/someproject").mkdir()
    (empty_root / "var/log/someproject/audit.log").write_text("audit log")
    (empty_root / "var/log/someproject/info.log").write_text("info")
    assert str(check_varlog(root)) == "Found non-empty logfile: /var/log/somefile.log (and 2 more)"


def test_varlog_reports_least_path_first(empty_root):
    (empty_root / "var/log/app2").mkdir(parents=True)
    (empty_root / "var/log/app2/info.log").write_text("info")
    (empty_root / "var/log/app.log").write_text("app")

    assert str(check_varlog(RootDir(empty_root))) == (
        "Found non-empty logfile: /var/log/app.log (and 1 more)"
    )


def test_boot(passing_root):
    root = RootDir(passing_root)
    assert check_boot(root) is None

    (passing_root / "boot/somesubdir").mkdir()
    assert str(check_boot(root)) == 'Found non-empty /boot: "somesubdir"'

    (passing_root / "boot/vmlinuz").write_text("kernel")
    assert str(check_boot(root)) == 'Found non-empty /boot: "somesubdir" (and 1 more)'


def test_boot_missing(empty_root):
    assert str(check_boot(RootDir(empty_root))) == "Missing /boot directory"


def test_varlog_through_symlink_inside_root(empty_root):
    (empty_root / "srv/log").mkdir(parents=True)
    (empty_root / "srv/log/app.log").write_text("entry")
    (empty_root / "var").mkdir()
    (empty_root / "var/log").symlink_to("../srv/log")

    assert str(check_varlog(RootDir(empty_root))) == "Found non-empty logfile: /var/log/app.log"


def test_varlog_symlink_escaping_root_is_an_error(empty_root, tmp_path):
    host_log = tmp_path / "host-log"
    host_log.mkdir()
    (host_log / "secret.log").write_text("host entry")
    (empty_root / "var").mkdir()
    (empty_root / "var/log").symlink_to(host_log)

    with pytest.raises(PathEscapeError):
        check_varlog(RootDir(empty_root))


def test_boot_symlink_escaping_root_is_an_error(empty_root, tmp_path):
    host_boot = tmp_path / "host-boot"
    host_boot.mkdir()
    (host_boot / "vmlinuz-host").write_text("kernel")

    (empty_root / "boot").symlink_to(host_boot)
    with pytest.raises(PathEscapeError):
        check_boot(RootDir(empty_root))

    (empty_root / "boot").unlink()
    (empty_root / "boot").symlink_to("../host-boot")
    with pytest.raises(PathEscapeError):
        check_boot(RootDir(empty_root))
