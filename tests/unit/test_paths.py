"""
Unit tests for path resolution and the traversal guard.
"""

import os

import pytest

from fileserver.handlers.paths import PathGuard


class TestResolve:

    def test_plain_concatenation(self):
        guard = PathGuard("/srv/www")
        assert guard.resolve("/docs/a.txt") == "/srv/www/docs/a.txt"

    def test_no_normalization(self):
        """The request path is glued on as-is, dots and all."""
        guard = PathGuard("/srv/www")
        assert guard.resolve("/../etc/passwd") == "/srv/www/../etc/passwd"
        assert guard.resolve("/a//b") == "/srv/www/a//b"

    def test_root_request(self):
        assert PathGuard("/srv/www").resolve("/") == "/srv/www/"


class TestTraversal:

    @pytest.mark.parametrize("request_path", [
        "/../etc/passwd",
        "/docs/../../secret",
        "/..",
        "/a..b.txt",
    ])
    def test_dotdot_forbidden(self, request_path):
        guard = PathGuard("/srv/www")
        assert guard.is_forbidden(guard.resolve(request_path))

    @pytest.mark.parametrize("request_path", [
        "/",
        "/docs/a.txt",
        "/.hidden",
        "/a.b.c",
    ])
    def test_regular_paths_allowed(self, request_path):
        guard = PathGuard("/srv/www")
        assert not guard.is_forbidden(guard.resolve(request_path))

    def test_encoded_dots_not_decoded(self):
        """Percent-escapes stay literal, so they pass the textual check."""
        guard = PathGuard("/srv/www")
        assert not guard.is_forbidden(guard.resolve("/%2e%2e/etc/passwd"))

    def test_none_is_not_forbidden(self):
        assert not PathGuard("/srv/www").is_forbidden(None)

    def test_no_filesystem_access(self, monkeypatch):
        """The default check never touches the disk."""
        def explode(*args, **kwargs):
            raise AssertionError("filesystem touched")

        guard = PathGuard("/srv/www")
        monkeypatch.setattr(os.path, "realpath", explode)
        monkeypatch.setattr(os.path, "exists", explode)

        assert guard.is_forbidden("/srv/www/../x")
        assert not guard.is_forbidden("/srv/www/x")


class TestStrictMode:

    def test_symlink_out_of_root(self, site, tmp_path):
        outside = tmp_path / "outside.txt"
        outside.write_text("secret")
        (site / "link.txt").symlink_to(outside)

        lenient = PathGuard(str(site))
        strict = PathGuard(str(site), strict=True)
        full = strict.resolve("/link.txt")

        assert not lenient.is_forbidden(full)
        assert strict.is_forbidden(full)
        assert strict.escapes_root(full)

    def test_symlink_inside_root(self, site):
        (site / "alias.txt").symlink_to(site / "readme.txt")
        guard = PathGuard(str(site), strict=True)
        assert not guard.is_forbidden(guard.resolve("/alias.txt"))

    def test_root_itself_allowed(self, site):
        guard = PathGuard(str(site), strict=True)
        assert not guard.escapes_root(guard.resolve("/"))

    def test_sibling_prefix_not_confused(self, tmp_path):
        """/srv/www-private is not inside /srv/www."""
        root = tmp_path / "www"
        root.mkdir()
        sibling = tmp_path / "www-private"
        sibling.mkdir()
        (root / "peek").symlink_to(sibling)

        guard = PathGuard(str(root), strict=True)
        assert guard.escapes_root(guard.resolve("/peek"))

    def test_dotdot_still_textual(self, site):
        """A ".." that stays inside the root is still rejected."""
        guard = PathGuard(str(site), strict=True)
        assert guard.is_forbidden(guard.resolve("/guides/../readme.txt"))

    def test_path_without_leading_slash(self, tmp_path):
        """A path without a leading slash lands in a sibling of the root."""
        root = tmp_path / "www"
        root.mkdir()
        sibling = tmp_path / "wwwx"
        sibling.mkdir()
        (sibling / "secret").write_text("hidden")

        lenient = PathGuard(str(root))
        strict = PathGuard(str(root), strict=True)
        full = lenient.resolve("x/secret")

        assert full == str(sibling / "secret")
        assert not lenient.is_forbidden(full)
        assert strict.is_forbidden(full)
