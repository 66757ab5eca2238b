"""Tool definition: disk_tool — sandboxed file and directory operations."""

from enum import Enum

from pydantic import BaseModel, Field

from agent_tools.actions import ActionRegistry
from agent_tools.dispatch import FacadeTool
from agent_tools.drivers.disk import LocalDriver


class DiskAction(str, Enum):
    DIRECTORY_CREATE = "directory_create"
    DIRECTORY_DELETE = "directory_delete"
    DIRECTORY_MOVE = "directory_move"
    DIRECTORY_LIST = "directory_list"
    FILE_CREATE = "file_create"
    FILE_DELETE = "file_delete"
    FILE_MOVE = "file_move"
    FILE_READ = "file_read"
    FILE_WRITE = "file_write"
    FILE_REPLACE = "file_replace"


# ---------------------------------------------------------------------------
# Parameter models
# ---------------------------------------------------------------------------

class PathParams(BaseModel):
    path: str = Field(description="A file or directory path, relative to the sandbox root.")


class ListParams(BaseModel):
    path: str = Field(".", description="A file or directory path, relative to the sandbox root.")


class MoveParams(PathParams):
    destination: str = Field(description="Target path for a move.")


class WriteParams(PathParams):
    text: str = Field(description="The text to write to the file.")


class ReplaceParams(PathParams):
    old_text: str = Field(description="The text to be replaced.")
    new_text: str = Field(description="The replacement text.")


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------

ACTIONS = ActionRegistry("disk_tool", DiskAction)


class DiskTool(FacadeTool):
    """Files and directories under one sandbox root."""

    TOOL_NAME = "disk_tool"
    DESCRIPTION = (
        "A tool for interacting with a system. It is able to list, create, "
        "delete, move and modify directories and files."
    )
    ACTIONS = ACTIONS

    def __init__(self, driver=None, root=None, **kwargs):
        super().__init__(**kwargs)
        self.driver = driver or LocalDriver(root=root)


@ACTIONS.register(DiskAction.DIRECTORY_CREATE, PathParams, "creates a directory at a specific `path`")
def _directory_create(tool, p):
    return tool.driver.directory_create(p.path)


@ACTIONS.register(DiskAction.DIRECTORY_DELETE, PathParams, "deletes an empty directory at a specific `path`")
def _directory_delete(tool, p):
    return tool.driver.directory_delete(p.path)


@ACTIONS.register(DiskAction.DIRECTORY_MOVE, MoveParams, "moves a directory from `path` to `destination`")
def _directory_move(tool, p):
    return tool.driver.directory_move(p.path, p.destination)


@ACTIONS.register(DiskAction.DIRECTORY_LIST, ListParams,
                  "lists the contents of a directory at a specific `path` (use '.' for root)")
def _directory_list(tool, p):
    return tool.driver.directory_list(p.path)


@ACTIONS.register(DiskAction.FILE_CREATE, PathParams, "creates an empty file at a specific `path`")
def _file_create(tool, p):
    return tool.driver.file_create(p.path)


@ACTIONS.register(DiskAction.FILE_DELETE, PathParams, "deletes a file at a specific `path`")
def _file_delete(tool, p):
    return tool.driver.file_delete(p.path)


@ACTIONS.register(DiskAction.FILE_MOVE, MoveParams, "moves a file from `path` to `destination`")
def _file_move(tool, p):
    return tool.driver.file_move(p.path, p.destination)


@ACTIONS.register(DiskAction.FILE_READ, PathParams, "reads the contents of a file at a specific `path`")
def _file_read(tool, p):
    return tool.driver.file_read(p.path)


@ACTIONS.register(DiskAction.FILE_WRITE, WriteParams, "writes `text` to a file at a specific `path`")
def _file_write(tool, p):
    return tool.driver.file_write(p.path, p.text)


@ACTIONS.register(DiskAction.FILE_REPLACE, ReplaceParams,
                  "replaces every `old_text` with `new_text` in a file at a specific `path`")
def _file_replace(tool, p):
    return tool.driver.file_replace(p.path, p.old_text, p.new_text)


ACTIONS.freeze()


# ---------------------------------------------------------------------------
# Registry attributes
# ---------------------------------------------------------------------------

TOOL_NAME = DiskTool.TOOL_NAME

DEPENDENCIES = {"config": "_config", "disk_driver": "_driver"}

SCHEMA = DiskTool.schema()

SYSTEM_PROMPT_RULE = (
    "For reading, writing, listing, moving or deleting files and directories, "
    "call disk_tool. Paths are relative to the working root; never use '..' "
    "or absolute paths."
)

_config = None
_driver = None
_tool = None


def reset():
    global _tool
    _tool = None


def _get_tool() -> DiskTool:
    global _tool
    if _tool is None:
        root = _config.get("disk.root") if _config else None
        timeout = _config.get("dispatch.timeout_seconds") if _config else None
        _tool = DiskTool(driver=_driver, root=root, timeout_seconds=timeout)
    return _tool


def handler(args: dict):
    """Route {"action": ..., **params} to the disk facade."""
    params = dict(args)
    action = params.pop("action", None)
    return _get_tool().execute(action, **params)
