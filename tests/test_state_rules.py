from rootlint.rules.state import check_sysusers, check_var_tmpfiles
from rootlint.utils.rootfs import RootDir


def test_var_tmpfiles_passes_on_empty_var(passing_rootdir):
    assert check_var_tmpfiles(passing_rootdir) is None


def test_var_tmpfiles_message_truncates_samples(empty_root):
    for index in range(7):
        (empty_root / f"var/lib/app{index}").mkdir(parents=True)
    (empty_root / "var/lib/app0/state.db").write_text("x")
    (empty_root / "usr/lib/tmpfiles.d").mkdir(parents=True)
    (empty_root / "usr/lib/tmpfiles.d/var.conf").write_text("d /var/lib 0755 root root -\n")

    message = str(check_var_tmpfiles(RootDir(empty_root)))
    lines = message.splitlines()

    assert lines[0] == "Found content in /var missing systemd tmpfiles.d entries:"
    assert lines[1].startswith("  d /var/lib/app0 ")
    assert lines[6] == "  ...and 2 more"
    assert lines[7] == "Found non-directory/non-symlink files in /var:"
    assert lines[8] == "  /var/lib/app0/state.db"
    assert len(lines) == 9


def test_sysusers_passes_without_passwd(empty_root):
    assert check_sysusers(RootDir(empty_root)) is None


def test_sysusers_message(empty_root):
    (empty_root / "etc").mkdir()
    (empty_root / "etc/passwd").write_text(
        "".join(f"user{index}:x:{1000 + index}:{1000 + index}::/:/bin/sh\n" for index in range(6))
    )
    (empty_root / "etc/group").write_text("extra:x:2000:\n")

    message = str(check_sysusers(RootDir(empty_root)))

    assert message == (
        "Found /etc/passwd entry without corresponding systemd sysusers.d:\n"
        "  user0\n  user1\n  user2\n  user3\n  user4\n  ...and 1 more\n"
        "Found /etc/group entry without corresponding systemd sysusers.d:\n"
        "  extra\n"
    )
