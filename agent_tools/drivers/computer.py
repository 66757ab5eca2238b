"""Computer-input driver contract (keyboard, mouse, scroll)."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ComputerDriver(Protocol):
    """Capability contract for OS-level input backends.

    Coordinates are {"x": int, "y": int}; buttons are "left", "middle" or
    "right"; scroll directions are "up", "down", "left" or "right".
    """

    def key(self, text: str): ...
    def hold_key(self, text: str, duration: float): ...
    def mouse_position(self) -> dict: ...
    def mouse_move(self, coordinate: dict): ...
    def mouse_click(self, coordinate: dict, button: str): ...
    def mouse_double_click(self, coordinate: dict, button: str): ...
    def mouse_triple_click(self, coordinate: dict, button: str): ...
    def mouse_down(self, coordinate: dict, button: str): ...
    def mouse_up(self, coordinate: dict, button: str): ...
    def mouse_drag(self, coordinate: dict, button: str): ...
    def type(self, text: str): ...
    def scroll(self, amount: int, direction: str): ...
    def wait(self, duration: float): ...
