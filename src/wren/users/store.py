"""UserStore protocol and the in-memory store.

A store is any object with async ``open``, ``register_user`` and
``close``. No base class required.
"""

import enum
import logging
import threading
from typing import Protocol, runtime_checkable

logger = logging.getLogger("wren.users")

MAX_USERNAME_LENGTH = 64


class RegistrationResult(enum.Enum):
    """Outcome of ``UserStore.register_user``."""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


@runtime_checkable
class UserStore(Protocol):
    """Protocol for user registration stores.

    ``register_user`` has insert-or-ignore semantics: registering a name
    twice is not an error, it reports ``ALREADY_EXISTS``. Failures raise
    ``UserStoreError``.
    """

    async def open(self) -> None: ...
    async def register_user(self, username: str) -> RegistrationResult: ...
    async def close(self) -> None: ...


def normalize_username(raw: object) -> str | None:
    """Strip surrounding whitespace; ``None`` if the value is unusable.

    Unusable means not a string, blank, or longer than
    ``MAX_USERNAME_LENGTH`` characters.
    """
    if not isinstance(raw, str):
        return None
    username = raw.strip()
    if not username or len(username) > MAX_USERNAME_LENGTH:
        return None
    return username


class MemoryUserStore:
    """Keeps usernames in a set for the life of the process."""

    __slots__ = ("_lock", "_users")

    def __init__(self) -> None:
        self._users: set[str] = set()
        self._lock = threading.Lock()

    async def open(self) -> None:
        pass

    async def register_user(self, username: str) -> RegistrationResult:
        with self._lock:
            if username in self._users:
                return RegistrationResult.ALREADY_EXISTS
            self._users.add(username)
        logger.info("Registered user %r", username)
        return RegistrationResult.CREATED

    async def close(self) -> None:
        pass

    def __contains__(self, username: object) -> bool:
        with self._lock:
            return username in self._users

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)
