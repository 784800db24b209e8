from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class LockTimeout(Exception):
    """Raised when a lock could not be acquired within the wait bound"""

    def __init__(self, key: str, timeout: float):
        super().__init__(f"Could not acquire lock '{key}' within {timeout}s")
        self.key = key
        self.timeout = timeout


class LockUnavailable(Exception):
    """Raised when the lock backend cannot be reached"""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Lock backend unavailable for '{key}': {reason}")
        self.key = key


class LockService(ABC):
    """Mutual exclusion across concurrent request handlers"""

    @abstractmethod
    def acquire(self, key: str, timeout: float) -> AbstractAsyncContextManager:
        """
        Async context manager holding the lock for `key`.

        Raises:
            LockTimeout: if the lock is not acquired within `timeout` seconds
            LockUnavailable: if the backend fails while acquiring
        """
        pass
