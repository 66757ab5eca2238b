"""Browser driver contract.

No concrete driver ships here; hosts plug in an automation backend that
satisfies BrowserDriver.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class BrowserDriver(Protocol):
    """Capability contract for browser automation backends."""

    def goto(self, url: str): ...
    def html(self) -> str: ...
    def click(self, selector: str): ...
    def fill_in(self, selector: str, text: str): ...
    def screenshot(self) -> bytes: ...
    def close(self): ...
