"""Tool definition: workflow_manager — persistent multi-step workflow tracking."""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field

from agent_tools.actions import ActionRegistry
from agent_tools.dispatch import FacadeTool
from agent_tools.workflow_manager import WorkflowManager, get_workflow_manager


class WorkflowAction(str, Enum):
    START = "start"
    STEP = "step"
    STATUS = "status"
    COMPLETE = "complete"


_STEP_DATA_DESC = (
    "Data for the current step. For 'start': initial configuration for the "
    "workflow. For 'step': input data and context for the next step. Any "
    "JSON-serializable object."
)
_ID_DESC = (
    "Identifier returned by 'start'; used for all later operations on that workflow."
)


class StartParams(BaseModel):
    step_data: Dict[str, Any] = Field(default_factory=dict, description=_STEP_DATA_DESC)


class WorkflowIdParams(BaseModel):
    workflow_id: str = Field(description=_ID_DESC)


class StepParams(WorkflowIdParams):
    step_data: Dict[str, Any] = Field(default_factory=dict, description=_STEP_DATA_DESC)


ACTIONS = ActionRegistry("workflow_manager", WorkflowAction)


class WorkflowTool(FacadeTool):
    """Facade over a WorkflowManager."""

    TOOL_NAME = "workflow_manager"
    DESCRIPTION = (
        "Manage multi-step workflows with state persisted across tool calls. "
        "Lifecycle: 'start' creates a workflow and returns its workflow_id; "
        "'step' records the next step; 'status' reports progress; 'complete' "
        "finalizes it. Completed workflows accept no further steps. State "
        "survives process restarts."
    )
    ACTIONS = ACTIONS

    def __init__(self, manager: WorkflowManager = None, config=None, **kwargs):
        super().__init__(**kwargs)
        self.manager = manager or get_workflow_manager(config) or WorkflowManager(config)


@ACTIONS.register(WorkflowAction.START, StartParams, "initialize a new workflow with `step_data`")
def _start(tool, p):
    return tool.manager.start(p.step_data)


@ACTIONS.register(WorkflowAction.STEP, StepParams, "record the next step of an active workflow")
def _step(tool, p):
    return tool.manager.step(p.workflow_id, p.step_data)


@ACTIONS.register(WorkflowAction.STATUS, WorkflowIdParams, "report progress of a workflow")
def _status(tool, p):
    return tool.manager.status(p.workflow_id)


@ACTIONS.register(WorkflowAction.COMPLETE, WorkflowIdParams, "mark a workflow as finished")
def _complete(tool, p):
    return tool.manager.complete(p.workflow_id)


ACTIONS.freeze()


# ---------------------------------------------------------------------------
# Registry attributes
# ---------------------------------------------------------------------------

TOOL_NAME = WorkflowTool.TOOL_NAME

DEPENDENCIES = {"config": "_config", "workflow_manager": "_manager"}

SCHEMA = WorkflowTool.schema()

SYSTEM_PROMPT_RULE = (
    "For multi-step tasks that must be tracked across calls, call "
    "workflow_manager: 'start' once, then 'step' for each stage with the "
    "returned workflow_id, and 'complete' when done."
)

_config = None
_manager = None
_tool = None


def reset():
    global _tool
    _tool = None


def _get_tool() -> WorkflowTool:
    global _tool
    if _tool is None:
        timeout = _config.get("dispatch.timeout_seconds") if _config else None
        _tool = WorkflowTool(manager=_manager, config=_config, timeout_seconds=timeout)
    return _tool


def handler(args: dict):
    params = dict(args)
    action = params.pop("action", None)
    return _get_tool().execute(action, **params)
