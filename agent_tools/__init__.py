"""
agent_tools — multi-action facade tools for LLM function calling.

Each facade (disk, database, browser, computer, eval, doc, workflow) maps an
``action`` plus named parameters onto one driver call and returns an
ActionResult. See agent_tools.tool_registry for discovery and dispatch by
tool name.
"""

from agent_tools.config import Config, load_config
from agent_tools.dispatch import FacadeTool
from agent_tools.results import ActionError, ActionResult, ErrorKind, SecurityViolation
from agent_tools.sandbox import PathTraversalError, Sandbox

__version__ = "0.1.0"

__all__ = [
    "ActionError",
    "ActionResult",
    "Config",
    "ErrorKind",
    "FacadeTool",
    "PathTraversalError",
    "Sandbox",
    "SecurityViolation",
    "load_config",
]
