"""
Dispatch Core — single entry point for multi-action facade tools.

Every facade subclasses FacadeTool and exposes execute(action, **params).
The flow for one call:

    1. action must be in the tool's closed ActionRegistry (else unsupported_action)
    2. params are validated against the action's pydantic model before any
       driver call (missing_parameter / invalid_parameter)
    3. check_ready() may refuse the call (e.g. no driver attached)
    4. the handler runs, calling one driver method
    5. exceptions become driver_error results; SecurityViolation propagates

The dispatch layer itself performs no I/O besides logging.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Optional

from pydantic import ValidationError

from agent_tools.actions import ActionRegistry, ActionSpec, action_name
from agent_tools.results import ActionResult, ErrorKind, SecurityViolation


class CallTimeout(Exception):
    """A handler did not return within the configured timeout."""


def _preview(value: Any, limit: int = 60) -> str:
    text = repr(value)
    if len(text) > limit:
        text = text[:limit - 3] + "..."
    return text


class FacadeTool:
    """Base class for tools that expose several actions over one driver."""

    TOOL_NAME: str = ""
    DESCRIPTION: str = ""
    ACTIONS: ActionRegistry = None

    def __init__(self, timeout_seconds: Optional[float] = None, logger=None):
        self.timeout_seconds = timeout_seconds
        self.logger = logger or logging.getLogger(f"agent_tools.tools.{self.TOOL_NAME}")

    @classmethod
    def schema(cls) -> dict:
        """OpenAI-compatible tool schema built from the action registry."""
        return {
            "type": "function",
            "function": {
                "name": cls.TOOL_NAME,
                "description": cls.DESCRIPTION.strip(),
                "parameters": cls.ACTIONS.parameters_schema(),
            },
        }

    def execute(self, action=None, **params) -> ActionResult:
        """Validate and route one action call.

        Args:
            action: Member (or value) of the tool's action Enum.
            **params: Named parameters; None values count as not supplied.

        Returns:
            ActionResult. Only SecurityViolation is ever raised.
        """
        start = time.time()
        name = action_name(action) if action is not None else ""
        supplied = {k: v for k, v in params.items() if v is not None}
        self.logger.info(
            f"{self.TOOL_NAME}#execute action={name!r} "
            + " ".join(f"{k}={_preview(v)}" for k, v in supplied.items())
        )

        spec = self.ACTIONS.get(action)
        if spec is None:
            supported = ", ".join(self.ACTIONS.names())
            self.logger.warning(f"{self.TOOL_NAME}: unsupported action {action!r}")
            return self._finish(ActionResult.failure(
                ErrorKind.UNSUPPORTED_ACTION,
                f"Unsupported action: {action}. Supported actions are: {supported}",
                parameter="action",
                suggestion=f"Use one of: {supported}",
            ), name, start)

        try:
            validated = spec.params.model_validate(supplied)
        except ValidationError as e:
            return self._finish(self._validation_failure(spec, e), name, start)

        unavailable = self.check_ready()
        if unavailable is not None:
            self.logger.error(f"{self.TOOL_NAME}#{name} not ready: {unavailable.error.message}")
            return self._finish(unavailable, name, start)

        try:
            value = self._invoke(spec, validated)
        except SecurityViolation as e:
            self.logger.error(f"{self.TOOL_NAME}#{name} rejected: {e}")
            raise
        except CallTimeout:
            self.logger.error(
                f"{self.TOOL_NAME}#{name} timed out after {self.timeout_seconds}s")
            return self._finish(ActionResult.failure(
                ErrorKind.TIMEOUT,
                f"Action '{name}' exceeded timeout of {self.timeout_seconds} seconds",
            ), name, start)
        except Exception as e:
            self.logger.error(f"{self.TOOL_NAME}#{name} failed: {type(e).__name__}: {e}")
            return self._finish(ActionResult.failure(
                ErrorKind.DRIVER_ERROR,
                str(e) or type(e).__name__,
                error_type=type(e).__name__,
            ), name, start)

        result = value if isinstance(value, ActionResult) else ActionResult.ok(value)
        return self._finish(result, name, start)

    def check_ready(self) -> Optional[ActionResult]:
        """Failure to return instead of running a validated call, or None."""
        return None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _invoke(self, spec: ActionSpec, params) -> Any:
        """Run the handler inline, or on a worker thread when a timeout is set.

        A timed-out handler keeps running in its thread; the caller stops
        waiting for it.
        """
        if not self.timeout_seconds:
            return spec.handler(self, params)

        pool = ThreadPoolExecutor(max_workers=1,
                                  thread_name_prefix=f"{self.TOOL_NAME}-call")
        future = pool.submit(spec.handler, self, params)
        try:
            return future.result(timeout=self.timeout_seconds)
        except FutureTimeout:
            if not future.done():
                raise CallTimeout(spec.name) from None
            raise
        finally:
            pool.shutdown(wait=False)

    def _validation_failure(self, spec: ActionSpec, error: ValidationError) -> ActionResult:
        errors = error.errors()
        # Only top-level fields count as missing; gaps inside a nested value are invalid
        missing = [e for e in errors
                   if e.get("type") == "missing" and len(e.get("loc", ())) == 1]
        if missing:
            param = str(missing[0]["loc"][0])
            return ActionResult.failure(
                ErrorKind.MISSING_PARAMETER,
                f"{param} param is required for the '{spec.name}' action",
                parameter=param,
                suggestion=f"Provide {param}",
            )
        first = errors[0]
        param = ".".join(str(p) for p in first.get("loc", ())) or None
        return ActionResult.failure(
            ErrorKind.INVALID_PARAMETER,
            f"Invalid value for {param}: {first.get('msg', 'invalid')}",
            parameter=param,
        )

    def _finish(self, result: ActionResult, name: str, start: float) -> ActionResult:
        return result.model_copy(update={
            "tool": self.TOOL_NAME,
            "action": name,
            "execution_time_ms": int((time.time() - start) * 1000),
        })
