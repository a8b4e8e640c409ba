"""Abstract base class for local key/value storage.

Mirrors the browser's localStorage contract: string keys mapped to string
values, no schema versioning, last write wins.
"""

from abc import ABC, abstractmethod


class BrowserStorage(ABC):
    """Abstract string-to-string key/value store.

    Implementations raise StorageError when the backing medium cannot be
    read or written; missing keys are not an error.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value for key.

        Args:
            key: Storage key (e.g., "profileCompleted").

        Returns:
            The stored string, or None if the key is absent.

        Raises:
            StorageError: If the storage cannot be read.
        """
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value.

        Raises:
            StorageError: If the storage cannot be written.
        """
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete key. Missing keys are ignored.

        Raises:
            StorageError: If the storage cannot be written.
        """
        ...

    @abstractmethod
    def clear(self) -> None:
        """Delete every key."""
        ...
