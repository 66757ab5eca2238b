"""
Workflow Manager — stateful multi-step workflows persisted between calls.

Lifecycle:
    start     → new active workflow, returns its workflow_id
    step      → appends step N+1 (active workflows only)
    status    → read-only snapshot
    complete  → active → completed (terminal)

Every operation re-reads the persisted record; nothing is cached in memory.
Missing workflows and illegal transitions come back as failed ActionResults
(not_found / invalid_state), never as exceptions.
"""

import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from agent_tools.logger import get_logger
from agent_tools.results import ActionResult, ErrorKind
from agent_tools.workflow_store import (
    Workflow, WorkflowStatus, WorkflowStep, WorkflowStore, is_valid_workflow_id,
)

StepProcessor = Callable[[Dict[str, Any], Workflow], Dict[str, Any]]


def _now() -> str:
    return datetime.now().astimezone().isoformat()


def default_step_processor(step_data: Dict[str, Any], workflow: Workflow) -> Dict[str, Any]:
    """Record what a step received and where it sits in the workflow."""
    return {
        "processed": True,
        "input_keys": list(step_data.keys()),
        "workflow_context": {
            "current_step": len(workflow.steps) + 1,
            "total_steps_so_far": len(workflow.steps),
        },
        "timestamp": _now(),
    }


def suggested_next_actions(workflow: Workflow) -> List[dict]:
    """Actions that make sense from the workflow's current state."""
    if workflow.is_completed:
        return []

    actions = [
        {
            "action": "step",
            "description": "Add the next workflow step",
            "required_params": ["workflow_id", "step_data"],
        },
        {
            "action": "status",
            "description": "Check workflow progress and status",
            "required_params": ["workflow_id"],
        },
    ]
    if workflow.steps:
        actions.append({
            "action": "complete",
            "description": "Mark workflow as complete",
            "required_params": ["workflow_id"],
        })
    return actions


def duration_seconds(workflow: Workflow) -> float:
    if not (workflow.completed_at and workflow.created_at):
        return 0
    completed = datetime.fromisoformat(workflow.completed_at)
    created = datetime.fromisoformat(workflow.created_at)
    return round((completed - created).total_seconds(), 2)


def _not_found(workflow_id: str) -> ActionResult:
    return ActionResult.failure(
        ErrorKind.NOT_FOUND,
        f"Workflow not found: {workflow_id}",
        parameter="workflow_id",
        suggestion="Start a new workflow or check the workflow_id",
    )


class WorkflowManager:
    """Runs workflow transitions against a WorkflowStore."""

    def __init__(self, config=None, storage_dir=None,
                 step_processor: Optional[StepProcessor] = None):
        self.config = config
        self.logger = get_logger(__name__, config)

        if storage_dir is None:
            storage_dir = config.get("workflows.storage_dir", ".workflows") if config else ".workflows"
        self.store = WorkflowStore(storage_dir)
        self.step_processor = step_processor or default_step_processor

        self.logger.info(f"Workflow manager initialized (storage: {self.store.storage_dir})")

    @property
    def storage_dir(self):
        return self.store.storage_dir

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, step_data: Optional[Dict[str, Any]] = None) -> ActionResult:
        now = _now()
        workflow = Workflow(
            id=str(uuid.uuid4()),
            status=WorkflowStatus.ACTIVE,
            created_at=now,
            updated_at=now,
            data=dict(step_data or {}),
        )
        self.store.save(workflow)
        self.logger.info(f"Workflow started: {workflow.id}")

        return ActionResult.ok({
            "workflow_id": workflow.id,
            "status": "started",
            "created_at": workflow.created_at,
            "next_actions": suggested_next_actions(workflow),
        })

    def step(self, workflow_id: str, step_data: Optional[Dict[str, Any]] = None) -> ActionResult:
        step_data = dict(step_data or {})
        if not is_valid_workflow_id(workflow_id):
            return _not_found(workflow_id)
        with self.store.locked(workflow_id):
            workflow = self.store.load(workflow_id)
            if workflow is None:
                return _not_found(workflow_id)
            if workflow.is_completed:
                return ActionResult.failure(
                    ErrorKind.INVALID_STATE,
                    "Cannot add steps to completed workflow",
                    parameter="workflow_id",
                    suggestion="Start a new workflow",
                )

            step_number = len(workflow.steps) + 1
            step_result = self.step_processor(step_data, workflow)
            step = WorkflowStep(
                step_number=step_number,
                data=step_data,
                result=step_result,
                processed_at=_now(),
            )

            workflow.steps.append(step)
            workflow.updated_at = step.processed_at
            workflow.step_count = step_number
            workflow.last_step_at = step.processed_at
            self.store.save(workflow)

        self.logger.info(f"Workflow step {step_number} completed: {workflow_id}")
        return ActionResult.ok({
            "workflow_id": workflow.id,
            "step_number": step_number,
            "step_result": step_result,
            "workflow_status": workflow.status.value,
            "total_steps": step_number,
            "next_actions": suggested_next_actions(workflow),
        })

    def status(self, workflow_id: str) -> ActionResult:
        workflow = self.store.load(workflow_id)
        if workflow is None:
            return _not_found(workflow_id)

        self.logger.debug(f"Workflow status retrieved: {workflow_id}")
        snapshot = {
            "workflow_id": workflow.id,
            "status": workflow.status.value,
            "created_at": workflow.created_at,
            "updated_at": workflow.updated_at,
            "step_count": len(workflow.steps),
            "steps": [
                {
                    "step_number": s.step_number,
                    "processed_at": s.processed_at,
                    "has_result": s.result is not None,
                }
                for s in workflow.steps
            ],
            "metadata": {
                "step_count": workflow.step_count,
                "last_step_at": workflow.last_step_at,
            },
            "next_actions": suggested_next_actions(workflow),
        }
        if workflow.completed_at:
            snapshot["completed_at"] = workflow.completed_at
        return ActionResult.ok(snapshot)

    def complete(self, workflow_id: str) -> ActionResult:
        if not is_valid_workflow_id(workflow_id):
            return _not_found(workflow_id)
        with self.store.locked(workflow_id):
            workflow = self.store.load(workflow_id)
            if workflow is None:
                return _not_found(workflow_id)
            if workflow.is_completed:
                return ActionResult.failure(
                    ErrorKind.INVALID_STATE,
                    "Workflow already completed",
                    parameter="workflow_id",
                )

            now = _now()
            workflow.status = WorkflowStatus.COMPLETED
            workflow.completed_at = now
            workflow.updated_at = now
            self.store.save(workflow)

        self.logger.info(f"Workflow completed: {workflow_id}")
        total = len(workflow.steps)
        return ActionResult.ok({
            "workflow_id": workflow.id,
            "status": workflow.status.value,
            "completed_at": workflow.completed_at,
            "total_steps": total,
            "summary": {
                "created_at": workflow.created_at,
                "completed_at": workflow.completed_at,
                "total_steps": total,
                "duration_seconds": duration_seconds(workflow),
            },
        })


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_instance: Optional[WorkflowManager] = None


def get_workflow_manager(config=None) -> Optional[WorkflowManager]:
    """Get or create the shared WorkflowManager.

    Returns None until a config has been supplied once. A config naming a
    different workflows.storage_dir replaces the shared instance.
    """
    global _instance
    if config is not None:
        storage_dir = Path(config.get("workflows.storage_dir", ".workflows"))
        if _instance is None or _instance.storage_dir != storage_dir:
            _instance = WorkflowManager(config)
    return _instance
