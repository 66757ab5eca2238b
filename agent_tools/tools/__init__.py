"""Tool definitions for LLM function calling.

Each .py file in this package defines one facade tool with standardized attributes:
    TOOL_NAME: str                  -- OpenAI function name
    SCHEMA: dict                    -- OpenAI-compatible tool schema (built from the action registry)
    SYSTEM_PROMPT_RULE: str         -- Per-tool rule for the LLM system prompt
    handler(args) -> ActionResult   -- Routes {"action": ..., **params} to the facade

Optional:
    DEPENDENCIES: dict       -- {dep_name: module_var_name} for runtime injection
    reset()                  -- Drop the cached facade so injected deps take effect
"""
