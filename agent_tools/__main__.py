"""
Command-line access to the tool registry.

Usage:
    python -m agent_tools list
    python -m agent_tools call disk_tool directory_list path=.
    python -m agent_tools call database_tool run 'statements=["SELECT 1"]'
"""

import argparse
import json
import sys

from agent_tools.config import load_config
from agent_tools.logger import configure_logging, get_logger
from agent_tools.results import SecurityViolation


def _parse_value(raw: str):
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _parse_params(pairs):
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {pair!r}")
        params[key] = _parse_value(value)
    return params


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="agent_tools", description="Run agent tools from the shell")
    parser.add_argument("--config", help="Path to a YAML config file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List registered tools and their actions")

    call = sub.add_parser("call", help="Execute one tool action")
    call.add_argument("tool", help="Tool name, e.g. disk_tool")
    call.add_argument("action", help="Action name, e.g. file_read")
    call.add_argument("params", nargs="*", help="key=value parameters (values parsed as JSON when possible)")

    args = parser.parse_args(argv)

    config = load_config(args.config)
    configure_logging(config, force=True)
    logger = get_logger("agent_tools.cli")

    # Imported after config load so tool modules see the configured logging
    from agent_tools import tool_registry
    tool_registry.inject_dependencies({"config": config})

    if args.command == "list":
        for name in tool_registry.tool_names():
            print(f"{name}: {', '.join(tool_registry.tool_actions(name))}")
        return 0

    try:
        params = _parse_params(args.params)
    except ValueError as e:
        parser.error(str(e))

    try:
        result = tool_registry.execute_tool(args.tool, {"action": args.action, **params})
    except SecurityViolation as e:
        logger.error(f"Refused: {e}")
        print(json.dumps({"success": False, "error": {"kind": e.kind, "message": str(e)}}, indent=2))
        return 2

    print(json.dumps(result.to_dict(), indent=2, default=str))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
