"""SQLite-backed user store using stdlib sqlite3 + anyio.

Runs every blocking sqlite3 call in a worker thread via
``anyio.to_thread``. The connection is opened with
``check_same_thread=False`` because different calls may land on
different pool threads, and ``autocommit=True`` so each insert commits
on its own.
"""

import logging
import sqlite3
from collections.abc import Callable
from pathlib import Path
from typing import Any

import anyio.to_thread

from wren.errors import UserStoreError
from wren.users.store import RegistrationResult

logger = logging.getLogger("wren.users")

_SCHEMA = "CREATE TABLE IF NOT EXISTS user (username TEXT PRIMARY KEY NOT NULL)"
_INSERT = "INSERT OR IGNORE INTO user (username) VALUES (?)"


def _run_sync(func: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking call in an anyio worker thread."""
    return anyio.to_thread.run_sync(func, *args)


class SQLiteUserStore:
    """User store backed by a single SQLite table.

    Usage::

        store = SQLiteUserStore("users.db")
        await store.open()
        await store.register_user("ada")   # RegistrationResult.CREATED
        await store.register_user("ada")   # RegistrationResult.ALREADY_EXISTS
        await store.close()
    """

    __slots__ = ("_conn", "_path")

    def __init__(self, path: str | Path) -> None:
        self._path = str(path)
        self._conn: sqlite3.Connection | None = None

    async def open(self) -> None:
        """Connect and create the ``user`` table if needed."""
        if self._conn is not None:
            return

        def _connect() -> sqlite3.Connection:
            conn = sqlite3.connect(self._path, autocommit=True, check_same_thread=False)
            try:
                conn.execute(_SCHEMA)
            except sqlite3.Error:
                conn.close()
                raise
            return conn

        try:
            self._conn = await _run_sync(_connect)
        except sqlite3.Error as exc:
            msg = f"Cannot open user database {self._path!r}: {exc}"
            raise UserStoreError(msg) from exc
        logger.info("Opened user database %s", self._path)

    async def register_user(self, username: str) -> RegistrationResult:
        """Insert *username* unless it is already present."""
        conn = self._conn
        if conn is None:
            msg = "User store is not open."
            raise UserStoreError(msg)
        try:
            cursor = await _run_sync(conn.execute, _INSERT, (username,))
        except sqlite3.Error as exc:
            msg = f"Cannot register user {username!r}: {exc}"
            raise UserStoreError(msg) from exc

        if cursor.rowcount == 1:
            logger.info("A row has been inserted with rowid: %s", cursor.lastrowid)
            return RegistrationResult.CREATED
        return RegistrationResult.ALREADY_EXISTS

    async def count(self) -> int:
        """Number of registered users."""
        conn = self._conn
        if conn is None:
            msg = "User store is not open."
            raise UserStoreError(msg)

        def _count() -> int:
            return conn.execute("SELECT COUNT(*) FROM user").fetchone()[0]

        return await _run_sync(_count)

    async def close(self) -> None:
        """Close the connection. Safe to call twice."""
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            await _run_sync(conn.close)
        except sqlite3.Error as exc:
            msg = f"Cannot close user database {self._path!r}: {exc}"
            raise UserStoreError(msg) from exc
        logger.info("Closed the database connection.")
