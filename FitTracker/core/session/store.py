"""
Credential store: durable key/value storage for the session token and the
serialized user profile.

Uses async file I/O so that persistence never blocks the event loop.
"""
import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import aiofiles
import aiofiles.os

from .exceptions import MalformedRecord, StorageFailure

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"
KNOWN_KEYS = (TOKEN_KEY, USER_KEY)


class CredentialStore(ABC):
    """
    Abstract credential store.

    Implementations never cache: every call goes to the backing medium.
    Backend failures are raised as :class:`StorageFailure`; a stored value
    that cannot be decoded is raised as :class:`MalformedRecord`.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key succeeds."""


class FileCredentialStore(CredentialStore):
    """Stores each key in its own file inside a private directory."""

    def __init__(self, directory: str):
        self._directory = os.path.abspath(os.path.expanduser(directory))

    @property
    def directory(self) -> str:
        return self._directory

    def _path(self, key: str) -> str:
        if key not in KNOWN_KEYS:
            raise ValueError(f"Unknown credential key: {key!r}")
        return os.path.join(self._directory, key)

    async def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise MalformedRecord(f"Stored {key} is not valid UTF-8", details={"key": key}) from e
        except OSError as e:
            raise StorageFailure(f"Failed to read {key}: {e}", key=key) from e

    async def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = f"{path}.tmp"
        try:
            await aiofiles.os.makedirs(self._directory, mode=0o700, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(value)
            os.chmod(tmp_path, 0o600)
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            raise StorageFailure(f"Failed to write {key}: {e}", key=key) from e
        logger.debug("Stored credential key %s", key)

    async def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageFailure(f"Failed to remove {key}: {e}", key=key) from e
        logger.debug("Removed credential key %s", key)


__all__ = [
    'CredentialStore',
    'FileCredentialStore',
    'TOKEN_KEY',
    'USER_KEY',
    'KNOWN_KEYS',
]
