"""
Configuration

YAML-backed settings with dotted-key lookups, e.g.
config.get("workflows.storage_dir", ".workflows").
"""

import copy
import os
from pathlib import Path
from typing import Any, Optional

import yaml


DEFAULTS = {
    "logging": {
        "level": "INFO",
        "file": None,
        "console": True,
    },
    "dispatch": {
        "timeout_seconds": None,
    },
    "disk": {
        "root": None,  # None -> current working directory
    },
    "database": {
        "path": ":memory:",
    },
    "workflows": {
        "storage_dir": ".workflows",
    },
    "eval": {
        "timeout_seconds": 30,
        "python_executable": None,  # None -> sys.executable
        "require_authorization": True,
    },
    "doc": {
        "max_pages": 50,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Settings tree with dotted-key access."""

    def __init__(self, data: Optional[dict] = None, path: Optional[Path] = None):
        self._data = _deep_merge(copy.deepcopy(DEFAULTS), data or {})
        self.path = path

    @classmethod
    def from_file(cls, path) -> "Config":
        path = Path(path)
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping at top level")
        return cls(data, path=path)

    def get(self, key: str, default: Any = None) -> Any:
        node = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return default if node is None else node

    def set(self, key: str, value: Any) -> None:
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value

    def as_dict(self) -> dict:
        return copy.deepcopy(self._data)


def load_config(path=None) -> Config:
    """Load configuration.

    Resolution order: explicit path, $AGENT_TOOLS_CONFIG, ./config.yaml,
    built-in defaults.
    """
    if path is None:
        path = os.environ.get("AGENT_TOOLS_CONFIG")
    if path is None and Path("config.yaml").exists():
        path = "config.yaml"
    if path is None:
        return Config()
    return Config.from_file(path)
