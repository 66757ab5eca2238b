"""Tool definition: browser_tool — drive a browser and inspect the current page."""

import base64
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from agent_tools import html_inspect
from agent_tools.actions import ActionRegistry, NoParams
from agent_tools.dispatch import FacadeTool
from agent_tools.results import ActionResult, ErrorKind


class BrowserAction(str, Enum):
    VISIT = "visit"
    PAGE_INSPECT = "page_inspect"
    UI_INSPECT = "ui_inspect"
    SELECTOR_INSPECT = "selector_inspect"
    CLICK = "click"
    TEXT_FIELD_SET = "text_field_set"
    SCREENSHOT = "screenshot"


class VisitParams(BaseModel):
    url: str = Field(description="e.g. 'https://example.com/some/page'")


class PageInspectParams(BaseModel):
    full_html: bool = Field(False, description="Return the full cleaned HTML instead of a summary.")


class UiInspectParams(BaseModel):
    text_content: str = Field(description="Search for elements containing this text.")
    selector: Optional[str] = Field(None, description="CSS selector, e.g. 'button#submit', '.link', '#main > a'.")
    context_size: int = Field(2, ge=0, description="Number of parent elements to include for context.")


class SelectorParams(BaseModel):
    selector: str = Field(description="CSS selector, e.g. 'button#submit', '.link', '#main > a'.")
    context_size: int = Field(2, ge=0, description="Number of parent elements to include for context.")


class ClickParams(BaseModel):
    selector: str = Field(description="CSS selector, e.g. 'button#submit', '.link', '#main > a'.")


class TextFieldParams(BaseModel):
    selector: str = Field(description="CSS selector, e.g. 'button#submit', '.link', '#main > a'.")
    value: str = Field(description="The text to set in the field.")


ACTIONS = ActionRegistry("browser_tool", BrowserAction)


class BrowserTool(FacadeTool):
    """Browser automation over an injected BrowserDriver."""

    TOOL_NAME = "browser_tool"
    DESCRIPTION = (
        "Browser automation: visit pages, inspect the page or its UI elements, "
        "click elements, fill in text fields and take screenshots."
    )
    ACTIONS = ACTIONS

    def __init__(self, driver=None, **kwargs):
        super().__init__(**kwargs)
        self.driver = driver

    def check_ready(self) -> Optional[ActionResult]:
        if self.driver is None:
            return ActionResult.failure(
                ErrorKind.DRIVER_ERROR,
                "Browser driver not initialized",
                suggestion="Inject a browser_driver before calling browser_tool",
            )
        return None

    def cleanup(self):
        """Close the browser, if one was ever attached."""
        if self.driver is not None:
            self.driver.close()
            self.logger.info("Browser closed")


@ACTIONS.register(BrowserAction.VISIT, VisitParams, "navigate to a specific `url`")
def _visit(tool, p):
    return tool.driver.goto(p.url)


@ACTIONS.register(BrowserAction.PAGE_INSPECT, PageInspectParams,
                  "summarize the current page (or its full HTML with `full_html`)")
def _page_inspect(tool, p):
    html = tool.driver.html()
    if p.full_html:
        return html_inspect.page_html(html)
    return html_inspect.summarize_page(html)


@ACTIONS.register(BrowserAction.UI_INSPECT, UiInspectParams,
                  "find elements containing `text_content`, optionally filtered by `selector`")
def _ui_inspect(tool, p):
    return html_inspect.find_by_text(
        tool.driver.html(), p.text_content, p.selector, p.context_size)


@ACTIONS.register(BrowserAction.SELECTOR_INSPECT, SelectorParams,
                  "inspect elements matching a CSS `selector`")
def _selector_inspect(tool, p):
    return html_inspect.select_elements(tool.driver.html(), p.selector, p.context_size)


@ACTIONS.register(BrowserAction.CLICK, ClickParams, "click an element using a `selector`")
def _click(tool, p):
    return tool.driver.click(p.selector)


@ACTIONS.register(BrowserAction.TEXT_FIELD_SET, TextFieldParams,
                  "set the `value` of the text field / area matching `selector`")
def _text_field_set(tool, p):
    return tool.driver.fill_in(p.selector, p.value)


@ACTIONS.register(BrowserAction.SCREENSHOT, NoParams, "capture the page as a PNG data URI")
def _screenshot(tool, p):
    png = tool.driver.screenshot()
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


ACTIONS.freeze()


# ---------------------------------------------------------------------------
# Registry attributes
# ---------------------------------------------------------------------------

TOOL_NAME = BrowserTool.TOOL_NAME

DEPENDENCIES = {"config": "_config", "browser_driver": "_driver"}

SCHEMA = BrowserTool.schema()

SYSTEM_PROMPT_RULE = (
    "For web page interaction (open a URL, find a button or field, click, "
    "type into a form, screenshot), call browser_tool. Inspect the page "
    "before clicking so the selector is real."
)

_config = None
_driver = None
_tool = None


def reset():
    global _tool
    _tool = None


def _get_tool() -> BrowserTool:
    global _tool
    if _tool is None:
        timeout = _config.get("dispatch.timeout_seconds") if _config else None
        _tool = BrowserTool(driver=_driver, timeout_seconds=timeout)
    return _tool


def handler(args: dict):
    params = dict(args)
    action = params.pop("action", None)
    return _get_tool().execute(action, **params)
