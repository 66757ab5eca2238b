"""
Action Registry — the closed vocabulary of actions for one facade tool.

Each facade declares a str Enum of action names and registers one handler per
member, together with a pydantic model describing the action's parameters.
Fields without a default are required; everything else is optional.

    class DiskAction(str, Enum):
        FILE_READ = "file_read"

    ACTIONS = ActionRegistry("disk_tool", DiskAction)

    @ACTIONS.register(DiskAction.FILE_READ, PathParams, "Read a file.")
    def _file_read(tool, params):
        return tool.driver.file_read(params.path)

    ACTIONS.freeze()
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel


class NoParams(BaseModel):
    """Parameters for actions that take none."""


@dataclass(frozen=True)
class ActionSpec:
    """One registered action."""
    name: str
    params: Type[BaseModel]
    handler: Callable[[Any, BaseModel], Any]
    description: str = ""

    @property
    def required(self) -> List[str]:
        return [name for name, field in self.params.model_fields.items()
                if field.is_required()]

    @property
    def optional(self) -> List[str]:
        return [name for name, field in self.params.model_fields.items()
                if not field.is_required()]


def action_name(action) -> str:
    """Normalize an Enum member or loose string into an action name."""
    if isinstance(action, Enum):
        return str(action.value)
    return str(action).strip().lower()


class ActionRegistry:
    """Maps each member of a tool's action Enum to its handler."""

    def __init__(self, tool_name: str, actions: Type[Enum]):
        self.tool_name = tool_name
        self.actions = actions
        self._specs: Dict[str, ActionSpec] = {}
        self._frozen = False

    def register(self, action, params: Type[BaseModel] = NoParams,
                 description: str = ""):
        """Decorator to register the handler for one action."""
        name = action_name(action)
        if name not in {m.value for m in self.actions}:
            raise ValueError(f"{name!r} is not a {self.actions.__name__} member")

        def decorator(fn):
            if self._frozen:
                raise RuntimeError(f"{self.tool_name} actions are frozen")
            if name in self._specs:
                raise ValueError(f"Action {name!r} registered twice for {self.tool_name}")
            self._specs[name] = ActionSpec(name, params, fn, description)
            return fn
        return decorator

    def freeze(self) -> "ActionRegistry":
        """Close the registry. Every Enum member must have a handler."""
        missing = [m.value for m in self.actions if m.value not in self._specs]
        if missing:
            raise RuntimeError(
                f"{self.tool_name} has no handler for: {', '.join(missing)}")
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, action) -> Optional[ActionSpec]:
        if action is None:
            return None
        return self._specs.get(action_name(action))

    def names(self) -> List[str]:
        return [m.value for m in self.actions]

    def __contains__(self, action) -> bool:
        return self.get(action) is not None

    def __iter__(self):
        return (self._specs[name] for name in self.names() if name in self._specs)

    # ------------------------------------------------------------------
    # Schema generation
    # ------------------------------------------------------------------

    def parameters_schema(self) -> dict:
        """JSON Schema for the tool's flat parameter bag.

        All action parameters are merged into one object; only ``action`` is
        required at the schema level because requirements differ per action.
        """
        properties: Dict[str, dict] = {
            "action": {
                "type": "string",
                "enum": self.names(),
                "description": "Options:\n" + "\n".join(
                    f"* `{spec.name}`: {spec.description}".rstrip(": ")
                    for spec in self
                ),
            }
        }
        required_by: Dict[str, List[str]] = {}

        for spec in self:
            schema = spec.params.model_json_schema()
            defs = schema.get("$defs", {})
            for name, prop in schema.get("properties", {}).items():
                if name not in properties:
                    properties[name] = _flatten_property(prop, defs)
                if name in spec.required:
                    required_by.setdefault(name, []).append(spec.name)

        for name, actions in required_by.items():
            desc = properties[name].get("description", "")
            note = "Required for: " + ", ".join(f"`{a}`" for a in actions)
            properties[name]["description"] = f"{desc} {note}".strip()

        return {"type": "object", "properties": properties, "required": ["action"]}


def _flatten_property(prop: dict, defs: dict) -> dict:
    """Inline $ref / Optional[...] wrappers pydantic emits."""
    prop = dict(prop)
    if "anyOf" in prop:
        choices = [c for c in prop.pop("anyOf") if c.get("type") != "null"]
        if choices:
            prop = {**choices[0], **prop}
    if "$ref" in prop:
        ref = prop.pop("$ref").rsplit("/", 1)[-1]
        prop = {**defs.get(ref, {}), **prop}
        prop.pop("title", None)
    prop.pop("title", None)
    if "default" in prop and prop["default"] is None:
        del prop["default"]
    return prop
