"""Driver contracts, one per resource domain, and the bundled implementations."""

from agent_tools.drivers.browser import BrowserDriver
from agent_tools.drivers.computer import ComputerDriver
from agent_tools.drivers.database import DatabaseDriver, SqliteDriver, StatementStatus
from agent_tools.drivers.disk import DiskDriver, LocalDriver

__all__ = [
    "BrowserDriver",
    "ComputerDriver",
    "DatabaseDriver",
    "DiskDriver",
    "LocalDriver",
    "SqliteDriver",
    "StatementStatus",
]
