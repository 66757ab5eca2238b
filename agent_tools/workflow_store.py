"""
Workflow Store — one JSON record per workflow, rewritten whole on every change.

Records live at <storage_dir>/workflow_<id>.json. Writes go to a temporary
file in the same directory and are renamed over the record, so a crash never
leaves a torn record behind.

Locking: a per-ID threading.Lock serializes read-modify-write cycles inside
one process (see WorkflowStore.locked). Separate processes sharing a
storage_dir are not coordinated; the last write wins.
"""

import json
import logging
import os
import tempfile
import threading
import uuid
import weakref
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger("agent_tools.workflow_store")


class WorkflowStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass
class WorkflowStep:
    """One entry in a workflow's append-only step log."""
    step_number: int
    data: Dict[str, Any]
    result: Optional[Dict[str, Any]]
    processed_at: str


@dataclass
class Workflow:
    """A persisted multi-step workflow record."""
    id: str
    status: WorkflowStatus
    created_at: str
    updated_at: str
    data: Dict[str, Any] = field(default_factory=dict)
    steps: List[WorkflowStep] = field(default_factory=list)
    completed_at: Optional[str] = None
    step_count: int = 0
    last_step_at: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == WorkflowStatus.COMPLETED

    def to_record(self) -> dict:
        record = {
            "id": self.id,
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "data": self.data,
            "metadata": {
                "step_count": self.step_count,
                "last_step_at": self.last_step_at,
            },
            "steps": [asdict(step) for step in self.steps],
        }
        if self.completed_at:
            record["completed_at"] = self.completed_at
        return record

    @classmethod
    def from_record(cls, record: dict) -> "Workflow":
        metadata = record.get("metadata") or {}
        steps = [WorkflowStep(**step) for step in record.get("steps", [])]
        return cls(
            id=record["id"],
            status=WorkflowStatus(record["status"]),
            created_at=record["created_at"],
            updated_at=record["updated_at"],
            data=record.get("data") or {},
            steps=steps,
            completed_at=record.get("completed_at"),
            step_count=metadata.get("step_count", len(steps)),
            last_step_at=metadata.get("last_step_at"),
        )


def is_valid_workflow_id(workflow_id: str) -> bool:
    """IDs are uuid4 strings; anything else never names a record."""
    try:
        return str(uuid.UUID(str(workflow_id))) == str(workflow_id).lower()
    except (ValueError, AttributeError, TypeError):
        return False


class WorkflowStore:
    """File-per-record key/value store for workflows."""

    def __init__(self, storage_dir):
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        # Entries vanish once no caller holds the lock
        self._locks = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def path_for(self, workflow_id: str) -> Path:
        if not is_valid_workflow_id(workflow_id):
            raise ValueError(f"Invalid workflow id: {workflow_id!r}")
        return self.storage_dir / f"workflow_{str(workflow_id).lower()}.json"

    @contextmanager
    def locked(self, workflow_id: str) -> Iterator[None]:
        """Hold the in-process lock for one workflow ID.

        Raises:
            ValueError: if workflow_id is not a valid ID.
        """
        if not is_valid_workflow_id(workflow_id):
            raise ValueError(f"Invalid workflow id: {workflow_id!r}")
        key = str(workflow_id).lower()
        with self._locks_guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            yield

    def exists(self, workflow_id: str) -> bool:
        return is_valid_workflow_id(workflow_id) and self.path_for(workflow_id).exists()

    def load(self, workflow_id: str) -> Optional[Workflow]:
        """Read a record from disk, or None if it does not exist."""
        if not is_valid_workflow_id(workflow_id):
            return None
        path = self.path_for(workflow_id)
        if not path.exists():
            return None
        with open(path, "r") as f:
            record = json.load(f)
        return Workflow.from_record(record)

    def save(self, workflow: Workflow) -> Path:
        """Atomically replace the record for workflow.id."""
        path = self.path_for(workflow.id)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=self.storage_dir)
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(workflow.to_record(), f, indent=2, default=str)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug(f"Workflow state saved: {path}")
        return path

    def list_ids(self) -> List[str]:
        return sorted(
            p.stem[len("workflow_"):]
            for p in self.storage_dir.glob("workflow_*.json")
        )
