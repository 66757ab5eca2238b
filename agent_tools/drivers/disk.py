"""Filesystem driver contract and the local sandboxed implementation."""

import logging
import os
import shutil
from typing import List, Protocol, runtime_checkable

from agent_tools.sandbox import Sandbox

logger = logging.getLogger("agent_tools.drivers.disk")


@runtime_checkable
class DiskDriver(Protocol):
    """Capability contract for filesystem access."""

    def directory_create(self, path: str): ...
    def directory_delete(self, path: str): ...
    def directory_move(self, path: str, destination: str): ...
    def directory_list(self, path: str = ".") -> List[dict]: ...
    def file_create(self, path: str): ...
    def file_delete(self, path: str): ...
    def file_move(self, path: str, destination: str): ...
    def file_read(self, path: str) -> str: ...
    def file_write(self, path: str, text: str): ...
    def file_replace(self, path: str, old_text: str, new_text: str): ...


class LocalDriver:
    """Local disk access confined to a sandbox root.

    Every path argument is resolved through the Sandbox before the filesystem
    is touched; escapes raise PathTraversalError.
    """

    def __init__(self, root=None):
        self.sandbox = Sandbox(root if root is not None else os.getcwd())

    @property
    def root(self):
        return self.sandbox.root

    # ------------------------------------------------------------------
    # Directories
    # ------------------------------------------------------------------

    def directory_create(self, path: str) -> dict:
        target = self.sandbox.resolve(path, allow_root=True)
        target.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Created directory {target}")
        return {"path": self.sandbox.relative(target), "created": True}

    def directory_delete(self, path: str) -> dict:
        """Remove an empty directory."""
        target = self.sandbox.resolve_entry(path)
        if target.is_symlink():
            raise NotADirectoryError(f"Not a directory: {path}")
        target.rmdir()
        return {"path": self.sandbox.relative(target), "deleted": True}

    def directory_move(self, path: str, destination: str) -> dict:
        source = self.sandbox.resolve_entry(path)
        target = self.sandbox.resolve(destination)
        if not source.is_dir():
            raise NotADirectoryError(f"Not a directory: {path}")
        shutil.move(str(source), str(target))
        return {"path": self.sandbox.relative(source),
                "destination": self.sandbox.relative(target)}

    def directory_list(self, path: str = ".") -> List[dict]:
        """Entries of a directory, directories first, then by name."""
        target = self.sandbox.resolve(path, allow_root=True)
        entries = []
        for entry in target.iterdir():
            is_dir = entry.is_dir()
            entries.append({
                "name": entry.name,
                "path": entry.relative_to(self.root).as_posix(),
                "type": "directory" if is_dir else "file",
                "size": None if is_dir else entry.stat().st_size,
            })
        entries.sort(key=lambda e: (e["type"] != "directory", e["name"]))
        return entries

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def file_create(self, path: str) -> dict:
        """Create an empty file; an existing file is left untouched."""
        target = self.sandbox.resolve(path)
        existed = target.exists()
        if not existed:
            target.touch()
        return {"path": self.sandbox.relative(target), "created": not existed}

    def file_delete(self, path: str) -> dict:
        target = self.sandbox.resolve_entry(path)
        target.unlink()
        return {"path": self.sandbox.relative(target), "deleted": True}

    def file_move(self, path: str, destination: str) -> dict:
        source = self.sandbox.resolve_entry(path)
        target = self.sandbox.resolve(destination)
        if not (source.is_file() or source.is_symlink()):
            raise FileNotFoundError(f"No such file: {path}")
        os.replace(source, target)
        return {"path": self.sandbox.relative(source),
                "destination": self.sandbox.relative(target)}

    def file_read(self, path: str) -> str:
        target = self.sandbox.resolve(path)
        with open(target, "r") as f:
            return f.read()

    def file_write(self, path: str, text: str) -> dict:
        target = self.sandbox.resolve(path)
        with open(target, "w") as f:
            f.write(text)
        return {"path": self.sandbox.relative(target), "bytes": len(text.encode())}

    def file_replace(self, path: str, old_text: str, new_text: str) -> dict:
        """Replace every occurrence of old_text in the file."""
        target = self.sandbox.resolve(path)
        with open(target, "r") as f:
            content = f.read()
        count = content.count(old_text) if old_text else 0
        if count:
            with open(target, "w") as f:
                f.write(content.replace(old_text, new_text))
        return {"path": self.sandbox.relative(target), "replacements": count}
