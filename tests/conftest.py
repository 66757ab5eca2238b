"""Pytest configuration and shared fixtures for agent_tools tests."""

import pytest

from agent_tools.config import Config
from agent_tools.drivers.disk import LocalDriver
from agent_tools.workflow_manager import WorkflowManager


class FakeBrowserDriver:
    """Records calls and serves a fixed page."""

    PAGE = """
    <html>
      <head><title>Sign in</title><script>var x = 1;</script></head>
      <body>
        <h1>Welcome back</h1>
        <form id="login">
          <label for="username">Username</label>
          <input id="username" name="username" type="text">
          <button type="submit" class="btn primary">Sign in</button>
        </form>
        <ul class="links"><li><a href="/help">Help</a></li><li><a href="/about">About</a></li></ul>
      </body>
    </html>
    """

    def __init__(self):
        self.calls = []
        self.closed = False

    def goto(self, url):
        self.calls.append(("goto", url))
        return {"status": "ok", "url": url}

    def html(self):
        return self.PAGE

    def click(self, selector):
        self.calls.append(("click", selector))
        return {"status": "ok"}

    def fill_in(self, selector, text):
        self.calls.append(("fill_in", selector, text))
        return {"status": "ok"}

    def screenshot(self):
        return b"\x89PNG\r\n\x1a\nfake"

    def close(self):
        self.closed = True


class FakeComputerDriver:
    """Records every call as (method, *args)."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        def record(*args):
            self.calls.append((name, *args))
            if name == "mouse_position":
                return {"x": 10, "y": 20}
            return {"status": "ok"}
        return record


@pytest.fixture
def sandbox_root(tmp_path):
    """Sandbox root directory with a sibling directory outside it."""
    root = tmp_path / "root"
    root.mkdir()
    (tmp_path / "outside").mkdir()
    (tmp_path / "outside" / "secret.txt").write_text("top secret")
    return root


@pytest.fixture
def disk_driver(sandbox_root) -> LocalDriver:
    return LocalDriver(root=sandbox_root)


@pytest.fixture
def browser_driver() -> FakeBrowserDriver:
    return FakeBrowserDriver()


@pytest.fixture
def computer_driver() -> FakeComputerDriver:
    return FakeComputerDriver()


@pytest.fixture
def config(tmp_path) -> Config:
    return Config({
        "logging": {"level": "WARNING"},
        "workflows": {"storage_dir": str(tmp_path / "workflows")},
        "disk": {"root": str(tmp_path)},
    })


@pytest.fixture
def workflow_manager(tmp_path, config) -> WorkflowManager:
    return WorkflowManager(config, storage_dir=tmp_path / "workflows")
