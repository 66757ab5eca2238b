"""Tool definition: computer_tool — keyboard and mouse control through an input driver."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from agent_tools.actions import ActionRegistry, NoParams
from agent_tools.dispatch import FacadeTool
from agent_tools.results import ActionResult, ErrorKind


class ComputerAction(str, Enum):
    KEY = "key"
    HOLD_KEY = "hold_key"
    MOUSE_POSITION = "mouse_position"
    MOUSE_MOVE = "mouse_move"
    MOUSE_CLICK = "mouse_click"
    MOUSE_DOUBLE_CLICK = "mouse_double_click"
    MOUSE_TRIPLE_CLICK = "mouse_triple_click"
    MOUSE_DOWN = "mouse_down"
    MOUSE_DRAG = "mouse_drag"
    MOUSE_UP = "mouse_up"
    TYPE = "type"
    SCROLL = "scroll"
    WAIT = "wait"


class MouseButton(str, Enum):
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"


class ScrollDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class Coordinate(BaseModel):
    x: int
    y: int


# ---------------------------------------------------------------------------
# Parameter models
# ---------------------------------------------------------------------------

class KeyParams(BaseModel):
    text: str = Field(description="Key or key combination in xdotool syntax (e.g. 'alt+Tab', 'Return', 'ctrl+s'), or text to type.")


class HoldKeyParams(KeyParams):
    duration: float = Field(ge=0, description="A duration in seconds.")


class MoveParams(BaseModel):
    coordinate: Coordinate = Field(description="An (x, y) pixel coordinate with integer values (e.g. {\"x\": 100, \"y\": 200}).")


class ButtonParams(MoveParams):
    mouse_button: MouseButton = Field(description="The mouse button to use.")


class ScrollParams(BaseModel):
    scroll_direction: ScrollDirection = Field(description="The direction to scroll.")
    scroll_amount: int = Field(ge=0, description="The amount of clicks to scroll.")


class WaitParams(BaseModel):
    duration: float = Field(ge=0, description="A duration in seconds.")


ACTIONS = ActionRegistry("computer_tool", ComputerAction)


class ComputerTool(FacadeTool):
    """OS-level input over an injected ComputerDriver."""

    TOOL_NAME = "computer_tool"
    DESCRIPTION = "A tool for interacting with a computer: keyboard, mouse and scroll wheel."
    ACTIONS = ACTIONS

    def __init__(self, driver=None, **kwargs):
        super().__init__(**kwargs)
        self.driver = driver

    def check_ready(self) -> Optional[ActionResult]:
        if self.driver is None:
            return ActionResult.failure(
                ErrorKind.DRIVER_ERROR,
                "Computer driver not initialized",
                suggestion="Inject a computer_driver before calling computer_tool",
            )
        return None


def _xy(coordinate: Coordinate) -> dict:
    return coordinate.model_dump()


@ACTIONS.register(ComputerAction.KEY, KeyParams, "press a single key / combination of keys")
def _key(tool, p):
    return tool.driver.key(p.text)


@ACTIONS.register(ComputerAction.HOLD_KEY, HoldKeyParams, "hold down a key for `duration` seconds")
def _hold_key(tool, p):
    return tool.driver.hold_key(p.text, p.duration)


@ACTIONS.register(ComputerAction.MOUSE_POSITION, NoParams, "get the current (x, y) position of the cursor")
def _mouse_position(tool, p):
    return tool.driver.mouse_position()


@ACTIONS.register(ComputerAction.MOUSE_MOVE, MoveParams, "move the cursor to `coordinate`")
def _mouse_move(tool, p):
    return tool.driver.mouse_move(_xy(p.coordinate))


@ACTIONS.register(ComputerAction.MOUSE_CLICK, ButtonParams, "click at `coordinate`")
def _mouse_click(tool, p):
    return tool.driver.mouse_click(_xy(p.coordinate), p.mouse_button.value)


@ACTIONS.register(ComputerAction.MOUSE_DOUBLE_CLICK, ButtonParams, "double click at `coordinate`")
def _mouse_double_click(tool, p):
    return tool.driver.mouse_double_click(_xy(p.coordinate), p.mouse_button.value)


@ACTIONS.register(ComputerAction.MOUSE_TRIPLE_CLICK, ButtonParams, "triple click at `coordinate`")
def _mouse_triple_click(tool, p):
    return tool.driver.mouse_triple_click(_xy(p.coordinate), p.mouse_button.value)


@ACTIONS.register(ComputerAction.MOUSE_DOWN, ButtonParams, "press the mouse button at `coordinate`")
def _mouse_down(tool, p):
    return tool.driver.mouse_down(_xy(p.coordinate), p.mouse_button.value)


@ACTIONS.register(ComputerAction.MOUSE_DRAG, ButtonParams, "drag the cursor to `coordinate`")
def _mouse_drag(tool, p):
    return tool.driver.mouse_drag(_xy(p.coordinate), p.mouse_button.value)


@ACTIONS.register(ComputerAction.MOUSE_UP, ButtonParams, "release the mouse button at `coordinate`")
def _mouse_up(tool, p):
    return tool.driver.mouse_up(_xy(p.coordinate), p.mouse_button.value)


@ACTIONS.register(ComputerAction.TYPE, KeyParams, "type a string of `text`")
def _type(tool, p):
    return tool.driver.type(p.text)


@ACTIONS.register(ComputerAction.SCROLL, ScrollParams,
                  "scroll `scroll_amount` wheel clicks in `scroll_direction`")
def _scroll(tool, p):
    return tool.driver.scroll(p.scroll_amount, p.scroll_direction.value)


@ACTIONS.register(ComputerAction.WAIT, WaitParams, "wait for `duration` seconds")
def _wait(tool, p):
    return tool.driver.wait(p.duration)


ACTIONS.freeze()


# ---------------------------------------------------------------------------
# Registry attributes
# ---------------------------------------------------------------------------

TOOL_NAME = ComputerTool.TOOL_NAME

DEPENDENCIES = {"config": "_config", "computer_driver": "_driver"}

SCHEMA = ComputerTool.schema()

SYSTEM_PROMPT_RULE = (
    "For controlling the desktop directly (press keys, type text, move or "
    "click the mouse, scroll), call computer_tool with pixel coordinates."
)

_config = None
_driver = None
_tool = None


def reset():
    global _tool
    _tool = None


def _get_tool() -> ComputerTool:
    global _tool
    if _tool is None:
        timeout = _config.get("dispatch.timeout_seconds") if _config else None
        _tool = ComputerTool(driver=_driver, timeout_seconds=timeout)
    return _tool


def handler(args: dict):
    params = dict(args)
    action = params.pop("action", None)
    return _get_tool().execute(action, **params)
