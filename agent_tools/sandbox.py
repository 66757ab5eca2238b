"""
Sandbox — confines path-based operations to a fixed root directory.

Paths are joined onto the root and canonicalized with os.path.realpath, which
collapses "." / ".." segments and follows symlinks. A symlink inside the root
that points outside it therefore resolves outside and is rejected. Delete and
move act on the entry itself: resolve_entry canonicalizes only its parent.
"""

import os
from pathlib import Path
from typing import Optional

from agent_tools.results import SecurityViolation


class PathTraversalError(SecurityViolation):
    """A path resolved outside the sandbox root."""


class Sandbox:
    """Resolves caller-supplied relative paths inside a fixed root."""

    def __init__(self, root):
        self.root = Path(os.path.realpath(os.fspath(root)))

    def resolve(self, path: Optional[str], allow_root: bool = False) -> Path:
        """Resolve path against the root, or raise PathTraversalError.

        Args:
            path: Relative path ("", None and "." mean the root itself).
            allow_root: Accept a path that resolves to the root. Only
                directory listing / creation allow this.

        Returns:
            Canonical absolute Path inside the root.
        """
        raw = os.fspath(path) if path else "."
        resolved = Path(os.path.realpath(os.path.join(self.root, raw)))

        if resolved == self.root:
            if allow_root:
                return resolved
            raise PathTraversalError(
                f"Operation not permitted on the sandbox root: {raw!r}")

        if self.root not in resolved.parents:
            raise PathTraversalError(
                f"Path {raw!r} resolves outside the sandbox root {self.root}")

        return resolved

    def resolve_entry(self, path: Optional[str]) -> Path:
        """Resolve the directory entry named by path without following it.

        Only the parent directory is canonicalized, so a symlink as the last
        component stays the link itself. Used by delete and move, which act
        on the entry rather than what it points to.
        """
        raw = os.fspath(path) if path else "."
        joined = os.path.normpath(os.path.join(self.root, raw))
        parent, name = os.path.split(joined)
        if name in ("", ".", ".."):
            raise PathTraversalError(
                f"Operation not permitted on the sandbox root: {raw!r}")

        parent_path = Path(os.path.realpath(parent))
        if parent_path != self.root and self.root not in parent_path.parents:
            raise PathTraversalError(
                f"Path {raw!r} resolves outside the sandbox root {self.root}")

        entry = parent_path / name
        if entry == self.root:
            raise PathTraversalError(
                f"Operation not permitted on the sandbox root: {raw!r}")
        return entry

    def relative(self, resolved: Path) -> str:
        """Root-relative display form of a resolved path."""
        rel = resolved.relative_to(self.root).as_posix()
        return rel or "."

    def contains(self, path: Optional[str]) -> bool:
        try:
            self.resolve(path, allow_root=True)
        except PathTraversalError:
            return False
        return True
