"""Tool definition: eval_tool — run Python snippets and safety-classified shell commands."""

import subprocess
import sys
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, Field

from agent_tools.actions import ActionRegistry
from agent_tools.dispatch import FacadeTool
from agent_tools.results import ActionResult, ErrorKind
from agent_tools.safety import classify_command, sanitize_output

# authorizer(tool_name, command) -> bool
Authorizer = Callable[[str, str], bool]


class EvalAction(str, Enum):
    PYTHON = "python"
    SHELL = "shell"


class CodeParams(BaseModel):
    code: str = Field(min_length=1, description="The Python code to execute.")


class CommandParams(BaseModel):
    command: str = Field(min_length=1, description="The shell command to execute.")


ACTIONS = ActionRegistry("eval_tool", EvalAction)


def _deny(tool_name: str, command: str) -> bool:
    return False


class EvalTool(FacadeTool):
    """Executes code in a subprocess and reports its output.

    Shell commands pass through the safety classifier first: blocked
    commands never run, and commands needing confirmation run only when the
    authorizer approves them.
    """

    TOOL_NAME = "eval_tool"
    DESCRIPTION = (
        "Execute code: `python` runs a Python snippet, `shell` runs a shell "
        "command. WARNING: this executes arbitrary code. Destructive or "
        "unknown shell commands require user authorization; dangerous ones "
        "are refused. Output is returned as stdout / stderr / exit_status."
    )
    ACTIONS = ACTIONS

    def __init__(self, authorizer: Optional[Authorizer] = None,
                 require_authorization: bool = True,
                 python_executable: Optional[str] = None,
                 exec_timeout: float = 30, cwd=None, **kwargs):
        super().__init__(**kwargs)
        self.authorizer = authorizer or _deny
        self.require_authorization = require_authorization
        self.python_executable = python_executable or sys.executable
        self.exec_timeout = exec_timeout
        self.cwd = cwd

    def run_process(self, argv, shell: bool = False) -> dict:
        completed = subprocess.run(
            argv, shell=shell, capture_output=True, text=True,
            cwd=self.cwd, timeout=self.exec_timeout,
        )
        if completed.returncode != 0:
            self.logger.warning(f"Process exited with status {completed.returncode}")
        return {
            "stdout": sanitize_output(completed.stdout),
            "stderr": sanitize_output(completed.stderr),
            "exit_status": completed.returncode,
        }

    def run_shell(self, command: str):
        verdict = classify_command(command)
        self.logger.info(f"Shell command classified as {verdict.tier.value}: {verdict.reason}")

        if verdict.blocked:
            return ActionResult.failure(
                ErrorKind.PERMISSION_DENIED,
                f"Command refused: {verdict.reason}",
                parameter="command",
            )
        if verdict.needs_authorization and self.require_authorization:
            if not self.authorizer(self.TOOL_NAME, command):
                self.logger.warning(f"User declined to execute the command: {command!r}")
                return ActionResult.failure(
                    ErrorKind.PERMISSION_DENIED,
                    "User declined to execute the command",
                    parameter="command",
                    suggestion=verdict.reason,
                )
        return self.run_process(command, shell=True)


@ACTIONS.register(EvalAction.PYTHON, CodeParams, "execute Python `code` in a subprocess")
def _python(tool, p):
    return tool.run_process([tool.python_executable, "-c", p.code])


@ACTIONS.register(EvalAction.SHELL, CommandParams, "execute a shell `command`")
def _shell(tool, p):
    return tool.run_shell(p.command)


ACTIONS.freeze()


# ---------------------------------------------------------------------------
# Registry attributes
# ---------------------------------------------------------------------------

TOOL_NAME = EvalTool.TOOL_NAME

DEPENDENCIES = {"config": "_config", "authorizer": "_authorizer"}

SCHEMA = EvalTool.schema()

SYSTEM_PROMPT_RULE = (
    "For computing something with code or running a shell command, call "
    "eval_tool. Provide complete code or the exact command; destructive "
    "commands will be refused unless the user approves them."
)

_config = None
_authorizer = None
_tool = None


def reset():
    global _tool
    _tool = None


def _get_tool() -> EvalTool:
    global _tool
    if _tool is None:
        cfg = _config
        _tool = EvalTool(
            authorizer=_authorizer,
            require_authorization=cfg.get("eval.require_authorization", True) if cfg else True,
            python_executable=cfg.get("eval.python_executable") if cfg else None,
            exec_timeout=cfg.get("eval.timeout_seconds", 30) if cfg else 30,
            timeout_seconds=cfg.get("dispatch.timeout_seconds") if cfg else None,
        )
    return _tool


def handler(args: dict):
    params = dict(args)
    action = params.pop("action", None)
    return _get_tool().execute(action, **params)
