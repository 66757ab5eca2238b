"""
Result envelope returned by every facade tool.

Ordinary failures travel as values (ActionResult with success=False and an
ActionError). The only exception that is allowed to cross the dispatch
boundary is SecurityViolation, so sandbox rejections cannot be swallowed by
generic error handling.
"""

import json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorKind(str, Enum):
    """Failure categories surfaced by the dispatch core."""
    UNSUPPORTED_ACTION = "unsupported_action"
    MISSING_PARAMETER = "missing_parameter"
    INVALID_PARAMETER = "invalid_parameter"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    DRIVER_ERROR = "driver_error"
    TIMEOUT = "timeout"
    PERMISSION_DENIED = "permission_denied"


class SecurityViolation(Exception):
    """Raised for security rejections. Never converted into an ActionResult."""
    kind = "security_violation"


class ActionError(BaseModel):
    """Why an action failed."""
    kind: ErrorKind
    message: str
    parameter: Optional[str] = None
    suggestion: Optional[str] = None
    error_type: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)


class ActionResult(BaseModel):
    """Result from a facade tool call"""
    tool: str = ""
    action: str = ""
    success: bool
    data: Optional[Any] = None
    error: Optional[ActionError] = None
    execution_time_ms: int = 0

    @classmethod
    def ok(cls, data: Any = None, **fields) -> "ActionResult":
        return cls(success=True, data=data, **fields)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, *,
                parameter: Optional[str] = None,
                suggestion: Optional[str] = None,
                error_type: Optional[str] = None,
                **fields) -> "ActionResult":
        return cls(
            success=False,
            error=ActionError(kind=kind, message=message, parameter=parameter,
                              suggestion=suggestion, error_type=error_type),
            **fields,
        )

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error else None

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)

    def to_message_content(self) -> str:
        """Convert to string for LLM message"""
        if self.success:
            if isinstance(self.data, (dict, list)):
                return json.dumps(self.data, indent=2, default=str)
            return str(self.data)
        text = f"Error ({self.error.kind}): {self.error.message}"
        if self.error.suggestion:
            text += f" Suggestion: {self.error.suggestion}"
        return text
