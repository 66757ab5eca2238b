"""Tool Registry — discovers facade tool modules and dispatches calls by tool name.

Each tool is a Python module in agent_tools/tools/ exposing:
    TOOL_NAME, SCHEMA, SYSTEM_PROMPT_RULE    (required)
    DEPENDENCIES, handler(args), reset()     (optional)

At import time the registry loads every such module and assembles:
    - TOOL_HANDLERS: tool_name -> handler function
    - ALL_TOOLS:     tool_name -> OpenAI function schema
    - build_tool_prompt_rules(): numbered rules for an LLM system prompt
    - execute_tool(): dispatches one call, returning an ActionResult
    - inject_dependencies(): wires runtime objects (config, drivers) into modules
"""

import importlib
import logging
from pathlib import Path
from types import ModuleType
from typing import Dict, List

from agent_tools.results import ActionResult, ErrorKind, SecurityViolation

logger = logging.getLogger("agent_tools.tool_registry")

TOOLS_PACKAGE = "agent_tools.tools"
_REQUIRED_ATTRS = ("TOOL_NAME", "SCHEMA", "SYSTEM_PROMPT_RULE")


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def _discover() -> List[ModuleType]:
    """Import every public module in the tools package.

    A module that fails to import (e.g. an optional library is missing) or
    lacks a required attribute is logged and skipped.
    """
    modules = []
    tools_dir = Path(__file__).parent / "tools"
    for path in sorted(tools_dir.glob("*.py")):
        if path.name.startswith("_"):
            continue
        mod_name = f"{TOOLS_PACKAGE}.{path.stem}"
        try:
            mod = importlib.import_module(mod_name)
        except Exception as e:
            logger.error(f"Failed to load tool module {mod_name}: {e}")
            continue
        missing = [a for a in _REQUIRED_ATTRS if not hasattr(mod, a)]
        if missing:
            logger.error(f"Tool module {mod_name} missing required attributes: {', '.join(missing)}")
            continue
        modules.append(mod)
    return modules


_tool_modules = _discover()
_modules_by_name: Dict[str, ModuleType] = {m.TOOL_NAME: m for m in _tool_modules}

TOOL_HANDLERS = {name: m.handler for name, m in _modules_by_name.items()
                 if getattr(m, "handler", None) is not None}
ALL_TOOLS = {name: m.SCHEMA for name, m in _modules_by_name.items()}

logger.info(
    f"Tool registry: {len(_tool_modules)} tools discovered, "
    f"{len(TOOL_HANDLERS)} with handlers"
)


def tool_names() -> list:
    return sorted(ALL_TOOLS)


def tool_actions(tool_name: str) -> list:
    """Action names a tool accepts, in declaration order."""
    schema = ALL_TOOLS.get(tool_name)
    if schema is None:
        return []
    return list(schema["function"]["parameters"]["properties"]["action"]["enum"])


# ---------------------------------------------------------------------------
# System prompt rules assembly
# ---------------------------------------------------------------------------

_GLOBAL_RULES_PREFIX = [
    "Every tool takes an 'action' parameter; pass only the parameters that "
    "action needs.",
]

_GLOBAL_RULES_SUFFIX = [
    "If a tool result reports missing_parameter or invalid_parameter, fix "
    "the arguments and call it again instead of guessing an answer.",
    "NEVER fabricate file contents, query results or workflow IDs. "
    "If unsure, call the tool.",
]


def build_tool_prompt_rules(active_tool_names: set) -> str:
    """Assemble numbered system prompt rules for the active tool set.

    Args:
        active_tool_names: Set of tool names in the current tool list
                          (e.g. {"disk_tool", "workflow_manager"})

    Returns:
        Complete rules block including preamble, per-tool rules, and suffix.
    """
    rules = list(_GLOBAL_RULES_PREFIX)

    for mod in _tool_modules:
        if mod.TOOL_NAME in active_tool_names and mod.SYSTEM_PROMPT_RULE:
            rules.append(mod.SYSTEM_PROMPT_RULE)

    rules.extend(_GLOBAL_RULES_SUFFIX)

    numbered = "\n".join(f"{i + 1}. {r}" for i, r in enumerate(rules))
    return (
        "You have access to tools that act on local resources. "
        "RULES — follow these EXACTLY:\n" + numbered
    )


# ---------------------------------------------------------------------------
# Tool execution
# ---------------------------------------------------------------------------

def execute_tool(tool_name: str, arguments: dict) -> ActionResult:
    """Dispatch a tool call to the appropriate handler.

    Args:
        tool_name: The tool function name from the LLM's tool_call.
        arguments: The parsed arguments dict, including "action".

    Returns:
        ActionResult. Failures are returned, not raised; only
        SecurityViolation propagates.
    """
    handler = TOOL_HANDLERS.get(tool_name)
    if not handler:
        logger.warning(f"Unknown tool: {tool_name}")
        return ActionResult.failure(
            ErrorKind.UNSUPPORTED_ACTION,
            f"Unknown tool '{tool_name}'. Available: {', '.join(sorted(TOOL_HANDLERS))}",
            tool=tool_name,
        )
    try:
        return handler(arguments or {})
    except SecurityViolation as e:
        logger.error(f"Security violation in {tool_name}: {e}")
        raise
    except Exception as e:
        logger.error(f"Tool execution error ({tool_name}): {e}")
        return ActionResult.failure(
            ErrorKind.DRIVER_ERROR,
            f"Error executing {tool_name}: {e}",
            error_type=type(e).__name__,
            tool=tool_name,
            action=str((arguments or {}).get("action", "")),
        )


# ---------------------------------------------------------------------------
# Dependency injection
# ---------------------------------------------------------------------------

def inject_dependencies(deps: dict):
    """Inject runtime dependencies into tool modules that declare them.

    Tool modules declare dependencies via a DEPENDENCIES dict mapping
    dependency names to module-level variable names:

        DEPENDENCIES = {"disk_driver": "_driver"}
        _driver = None  # Set at runtime

    Modules that received anything are reset so their cached facade is
    rebuilt with the new objects.

    Args:
        deps: Mapping of dependency name -> runtime object.
              e.g. {"config": <Config>, "browser_driver": <driver>}
    """
    for mod in _tool_modules:
        declared = getattr(mod, 'DEPENDENCIES', {})
        injected = False
        for dep_name, var_name in declared.items():
            if dep_name in deps and var_name:
                setattr(mod, var_name, deps[dep_name])
                injected = True
                logger.debug(f"Injected {dep_name} into {mod.TOOL_NAME}")
        reset = getattr(mod, 'reset', None)
        if injected and reset is not None:
            reset()
