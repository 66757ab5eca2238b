"""
Tests for path confinement.

Tests cover:
- Sandbox.resolve: relative, traversal, absolute and symlink paths
- LocalDriver: rejected operations leave the filesystem untouched
"""

import os

import pytest

from agent_tools.drivers.disk import LocalDriver
from agent_tools.results import SecurityViolation
from agent_tools.sandbox import PathTraversalError, Sandbox


def _snapshot(path):
    return sorted(
        (os.path.relpath(os.path.join(d, f), path))
        for d, dirs, files in os.walk(path)
        for f in dirs + files
    )


class TestSandboxResolve:
    """Tests for Sandbox.resolve."""

    def test_relative_path_inside_root(self, sandbox_root):
        sandbox = Sandbox(sandbox_root)
        resolved = sandbox.resolve("a/b.txt")
        assert resolved == sandbox.root / "a" / "b.txt"

    def test_dot_segments_that_stay_inside_are_allowed(self, sandbox_root):
        sandbox = Sandbox(sandbox_root)
        assert sandbox.resolve("a/../b.txt") == sandbox.root / "b.txt"

    @pytest.mark.parametrize("path", ["../outside/secret.txt", "../../etc/passwd", "a/../../x"])
    def test_traversal_rejected(self, sandbox_root, path):
        with pytest.raises(PathTraversalError):
            Sandbox(sandbox_root).resolve(path)

    def test_absolute_path_outside_rejected(self, sandbox_root, tmp_path):
        with pytest.raises(PathTraversalError):
            Sandbox(sandbox_root).resolve(str(tmp_path / "outside" / "secret.txt"))

    def test_root_needs_allow_root(self, sandbox_root):
        sandbox = Sandbox(sandbox_root)
        with pytest.raises(PathTraversalError):
            sandbox.resolve(".")
        assert sandbox.resolve(".", allow_root=True) == sandbox.root
        assert sandbox.resolve("", allow_root=True) == sandbox.root

    def test_symlink_escape_rejected(self, sandbox_root, tmp_path):
        os.symlink(tmp_path / "outside", sandbox_root / "link")
        with pytest.raises(PathTraversalError):
            Sandbox(sandbox_root).resolve("link/secret.txt")

    def test_is_a_security_violation(self):
        assert issubclass(PathTraversalError, SecurityViolation)

    def test_contains(self, sandbox_root):
        sandbox = Sandbox(sandbox_root)
        assert sandbox.contains("x.txt")
        assert not sandbox.contains("../x.txt")


class TestDriverRejectsEscapes:
    """A rejected path performs no filesystem mutation."""

    def test_write_outside_leaves_tree_unchanged(self, disk_driver, tmp_path):
        before = _snapshot(tmp_path)
        with pytest.raises(PathTraversalError):
            disk_driver.file_write("../outside/new.txt", "data")
        assert _snapshot(tmp_path) == before

    def test_delete_outside_keeps_file(self, disk_driver, tmp_path):
        with pytest.raises(PathTraversalError):
            disk_driver.file_delete("../outside/secret.txt")
        assert (tmp_path / "outside" / "secret.txt").read_text() == "top secret"

    def test_move_checks_destination(self, disk_driver, sandbox_root, tmp_path):
        (sandbox_root / "inside.txt").write_text("hi")
        with pytest.raises(PathTraversalError):
            disk_driver.file_move("inside.txt", "../outside/stolen.txt")
        assert (sandbox_root / "inside.txt").exists()
        assert not (tmp_path / "outside" / "stolen.txt").exists()

    def test_move_checks_source(self, disk_driver, sandbox_root):
        with pytest.raises(PathTraversalError):
            disk_driver.file_move("../outside/secret.txt", "copy.txt")
        assert not (sandbox_root / "copy.txt").exists()

    def test_symlink_read_rejected(self, disk_driver, sandbox_root, tmp_path):
        os.symlink(tmp_path / "outside" / "secret.txt", sandbox_root / "alias.txt")
        with pytest.raises(PathTraversalError):
            disk_driver.file_read("alias.txt")

    def test_default_root_is_cwd(self, sandbox_root, monkeypatch):
        monkeypatch.chdir(sandbox_root)
        driver = LocalDriver()
        assert driver.root == Sandbox(sandbox_root).root


class TestSymlinkEntries:
    """Delete and move act on a link itself, never on what it points to."""

    def test_delete_link_keeps_target(self, disk_driver, sandbox_root):
        (sandbox_root / "real.txt").write_text("keep me")
        os.symlink(sandbox_root / "real.txt", sandbox_root / "alias.txt")
        result = disk_driver.file_delete("alias.txt")
        assert result["path"] == "alias.txt"
        assert not os.path.lexists(sandbox_root / "alias.txt")
        assert (sandbox_root / "real.txt").read_text() == "keep me"

    def test_delete_link_to_outside_keeps_target(self, disk_driver, sandbox_root, tmp_path):
        os.symlink(tmp_path / "outside" / "secret.txt", sandbox_root / "alias.txt")
        disk_driver.file_delete("alias.txt")
        assert not os.path.lexists(sandbox_root / "alias.txt")
        assert (tmp_path / "outside" / "secret.txt").read_text() == "top secret"

    def test_move_link_moves_link(self, disk_driver, sandbox_root):
        (sandbox_root / "real.txt").write_text("keep me")
        os.symlink(sandbox_root / "real.txt", sandbox_root / "alias.txt")
        disk_driver.file_move("alias.txt", "renamed.txt")
        assert (sandbox_root / "renamed.txt").is_symlink()
        assert (sandbox_root / "real.txt").read_text() == "keep me"

    def test_directory_delete_refuses_link(self, disk_driver, sandbox_root):
        (sandbox_root / "real_dir").mkdir()
        os.symlink(sandbox_root / "real_dir", sandbox_root / "dir_link")
        with pytest.raises(NotADirectoryError):
            disk_driver.directory_delete("dir_link")
        assert (sandbox_root / "real_dir").is_dir()

    def test_entry_under_escaping_parent_rejected(self, sandbox_root, tmp_path):
        os.symlink(tmp_path / "outside", sandbox_root / "link")
        with pytest.raises(PathTraversalError):
            Sandbox(sandbox_root).resolve_entry("link/secret.txt")

    @pytest.mark.parametrize("path", [".", "", "a/..", "../root"])
    def test_entry_cannot_be_root(self, sandbox_root, path):
        with pytest.raises(PathTraversalError):
            Sandbox(sandbox_root).resolve_entry(path)
