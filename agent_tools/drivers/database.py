"""Statement driver contract and a SQLite implementation."""

import logging
import sqlite3
import threading
from enum import Enum
from typing import Any, Dict, Protocol, runtime_checkable

logger = logging.getLogger("agent_tools.drivers.database")


class StatementStatus(str, Enum):
    OK = "ok"
    ERROR = "error"


@runtime_checkable
class DatabaseDriver(Protocol):
    """Capability contract: run one statement, report {status, result}."""

    def perform(self, statement: str) -> Dict[str, Any]: ...


# Statements that return rows instead of modifying data
_READ_PREFIXES = ("select", "pragma", "with", "explain", "values")


def is_read_statement(statement: str) -> bool:
    return statement.lstrip().lower().startswith(_READ_PREFIXES)


class SqliteDriver:
    """Runs statements against a SQLite database.

    Reads return rows as dicts; writes are committed immediately and return
    the affected row count. sqlite3 errors become {"status": "error"} records.
    """

    def __init__(self, path: str = ":memory:", connection: sqlite3.Connection = None):
        self.path = path
        self._conn = connection or sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()

    def perform(self, statement: str) -> Dict[str, Any]:
        with self._lock:
            try:
                cursor = self._conn.execute(statement)
                if is_read_statement(statement):
                    rows = [dict(row) for row in cursor.fetchall()]
                    return {"status": StatementStatus.OK.value, "result": rows}
                self._conn.commit()
                return {"status": StatementStatus.OK.value,
                        "result": {"rowcount": cursor.rowcount}}
            except sqlite3.Error as e:
                logger.warning(f"Statement failed: {e}")
                # Release the write lock of the failed statement; earlier
                # statements were committed individually and stay.
                if self._conn.in_transaction:
                    self._conn.rollback()
                return {"status": StatementStatus.ERROR.value, "result": str(e)}

    def close(self):
        with self._lock:
            self._conn.close()
