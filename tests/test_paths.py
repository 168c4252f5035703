"""Tests for wren._internal.paths — base-directory confinement."""

import os

import pytest

from wren._internal.paths import safe_join
from wren.errors import PathTraversalError


@pytest.fixture
def base(tmp_path):
    root = tmp_path / "basedir"
    (root / "sub").mkdir(parents=True)
    (root / "sub" / "file.txt").write_text("ok")
    (tmp_path / "basedir-evil").mkdir()
    return root


class TestSafeJoin:
    def test_child_allowed(self, base) -> None:
        assert safe_join(base, "sub/file.txt") == (base / "sub" / "file.txt").resolve()

    @pytest.mark.parametrize(
        "absolute",
        ["/sub/file.txt", "/etc/passwd", "%2Fetc%2Fpasswd", "\\\\server\\share", "C:/Windows"],
    )
    def test_absolute_paths_rejected(self, base, absolute) -> None:
        with pytest.raises(PathTraversalError, match="absolute path"):
            safe_join(base, absolute)

    def test_base_itself_allowed(self, base) -> None:
        assert safe_join(base, ".") == base.resolve()

    def test_inner_dotdot_that_stays_inside(self, base) -> None:
        assert safe_join(base, "sub/../sub/file.txt") == (base / "sub" / "file.txt").resolve()

    @pytest.mark.parametrize(
        "probe",
        [
            "..",
            "../../etc/passwd",
            "..%2F..%2Fetc%2Fpasswd",
            "%2e%2e/%2e%2e/etc/passwd",
            "%252e%252e%252f%252e%252e%252fetc%252fpasswd",
            "../basedir-evil",
            "../basedir-evil/x.txt",
            "sub/../../basedir-evil",
        ],
    )
    def test_escapes_rejected(self, base, probe) -> None:
        with pytest.raises(PathTraversalError) as exc_info:
            safe_join(base, probe)
        assert exc_info.value.status == 403

    def test_nul_byte_rejected(self, base) -> None:
        with pytest.raises(PathTraversalError):
            safe_join(base, "sub/file.txt%00.png")

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlink_escape_rejected(self, base, tmp_path) -> None:
        outside = tmp_path / "outside.txt"
        outside.write_text("x")
        try:
            (base / "link.txt").symlink_to(outside)
        except OSError:
            pytest.skip("cannot create symlinks here")
        with pytest.raises(PathTraversalError):
            safe_join(base, "link.txt")
