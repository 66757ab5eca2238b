"""Tool definition: database_tool — run SQL statements in order, stopping at the first error."""

import json
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from agent_tools.actions import ActionRegistry
from agent_tools.dispatch import FacadeTool
from agent_tools.drivers.database import SqliteDriver, StatementStatus


class DatabaseAction(str, Enum):
    RUN = "run"


class StatementsParams(BaseModel):
    statements: List[str] = Field(
        description="A list of SQL statements to run sequentially "
                    "(e.g. ['SELECT * FROM users', 'INSERT INTO ...'])")


ACTIONS = ActionRegistry("database_tool", DatabaseAction)


class DatabaseTool(FacadeTool):
    """Runs statement sequences through a DatabaseDriver.

    Each driver record gets the statement that produced it; the run stops
    after the first record whose status is not "ok". Earlier statements are
    not rolled back.
    """

    TOOL_NAME = "database_tool"
    DESCRIPTION = (
        "Executes SQL commands (INSERT / UPDATE / SELECT / etc) on a database. "
        "Statements run in order; execution stops at the first failing "
        "statement and the results so far are returned, each tagged with "
        "its statement and status."
    )
    ACTIONS = ACTIONS

    def __init__(self, driver=None, **kwargs):
        super().__init__(**kwargs)
        self.driver = driver or SqliteDriver()

    def perform(self, statement: str) -> dict:
        self.logger.info(f"#perform statement={statement!r}")
        result = self.driver.perform(statement)
        self.logger.info(json.dumps(result, default=str))
        return result

    def run(self, statements: List[str]) -> List[dict]:
        executions = []
        for statement in statements:
            execution = {**self.perform(statement), "statement": statement}
            executions.append(execution)
            if execution.get("status") != StatementStatus.OK.value:
                break
        return executions


@ACTIONS.register(DatabaseAction.RUN, StatementsParams,
                  "runs `statements` in order, stopping after the first error")
def _run(tool, p):
    return tool.run(p.statements)


ACTIONS.freeze()


# ---------------------------------------------------------------------------
# Registry attributes
# ---------------------------------------------------------------------------

TOOL_NAME = DatabaseTool.TOOL_NAME

DEPENDENCIES = {"config": "_config", "database_driver": "_driver"}

SCHEMA = DatabaseTool.schema()

SYSTEM_PROMPT_RULE = (
    "For SQL queries or schema changes, call database_tool with action 'run' "
    "and the full list of statements in execution order."
)

_config = None
_driver = None
_tool = None


def reset():
    global _tool
    _tool = None


def _get_tool() -> DatabaseTool:
    global _tool
    if _tool is None:
        driver = _driver
        if driver is None:
            driver = SqliteDriver(_config.get("database.path", ":memory:") if _config else ":memory:")
        timeout = _config.get("dispatch.timeout_seconds") if _config else None
        _tool = DatabaseTool(driver=driver, timeout_seconds=timeout)
    return _tool


def handler(args: dict):
    """Route {"action": "run", "statements": [...]} to the database facade."""
    params = dict(args)
    action = params.pop("action", None)
    return _get_tool().execute(action, **params)
