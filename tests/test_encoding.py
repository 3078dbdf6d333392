import os

from rootlint.rules.encoding import check_utf8
from rootlint.utils.rootfs import RootDir
from rootlint.utils.walk import walk


def run_recursive_rule(root, check):
    for entry in walk(RootDir(root)):
        violation = check(entry)
        if violation is not None:
            return violation
    return None


def _b(path):
    return os.fsencode(path)


def test_non_utf8(tmp_path):
    root = _b(tmp_path)

    # Adversarial symlinks must not crash or hang the walk.
    (tmp_path / "subdir").mkdir()
    (tmp_path / "self").symlink_to("self")
    (tmp_path / "subdir/parent").symlink_to("..")
    (tmp_path / "broken").symlink_to("does-not-exist")
    (tmp_path / "escape").symlink_to("../../x")
    assert run_recursive_rule(tmp_path, check_utf8) is None

    baddir = os.path.join(root, b"subdir/2/bad\xffdir")
    (tmp_path / "subdir/2").mkdir()
    os.mkdir(baddir)
    violation = run_recursive_rule(tmp_path, check_utf8)
    assert str(violation) == '/subdir/2: Found non-utf8 filename "bad\\xFFdir"'
    os.rmdir(baddir)
    assert run_recursive_rule(tmp_path, check_utf8) is None

    badfile = os.path.join(root, b"regular\xff")
    with open(badfile, "wb") as handle:
        handle.write(b"Hello, world!\n")
    violation = run_recursive_rule(tmp_path, check_utf8)
    assert str(violation) == '/: Found non-utf8 filename "regular\\xFF"'
    os.unlink(badfile)
    assert run_recursive_rule(tmp_path, check_utf8) is None

    good_name = os.path.join(root, b"subdir/good-name")
    os.symlink(badfile, good_name)
    violation = run_recursive_rule(tmp_path, check_utf8)
    assert str(violation) == "/subdir/good-name: Found non-utf8 symlink target"
    os.unlink(good_name)
    assert run_recursive_rule(tmp_path, check_utf8) is None

    # A bad name is reported before a bad target.
    os.symlink(b"regular\xff", badfile)
    violation = run_recursive_rule(tmp_path, check_utf8)
    assert str(violation) == '/: Found non-utf8 filename "regular\\xFF"'
    os.unlink(badfile)
    assert run_recursive_rule(tmp_path, check_utf8) is None
