"""User registration storage.

The ``adduser`` route talks to a ``UserStore`` injected into the App.
Two stores ship with wren::

    from wren.users import MemoryUserStore, SQLiteUserStore

    store = SQLiteUserStore("users.db")   # persistent, insert-or-ignore
    store = MemoryUserStore()             # per-process, for tests and demos
"""

from wren.users.sqlite import SQLiteUserStore
from wren.users.store import (
    MAX_USERNAME_LENGTH,
    MemoryUserStore,
    RegistrationResult,
    UserStore,
    normalize_username,
)

__all__ = [
    "MAX_USERNAME_LENGTH",
    "MemoryUserStore",
    "RegistrationResult",
    "SQLiteUserStore",
    "UserStore",
    "normalize_username",
]
