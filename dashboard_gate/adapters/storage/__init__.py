"""Local key/value storage backends.

This module provides:
- BrowserStorage base class
- In-memory and JSON-file implementations
- Factory that picks a backend from the configured storage path
"""

from pathlib import Path

from dashboard_gate.adapters.storage.base import BrowserStorage
from dashboard_gate.adapters.storage.json_file import JsonFileStorage
from dashboard_gate.adapters.storage.memory import InMemoryStorage


def create_storage(path: Path | str | None = None) -> BrowserStorage:
    """Create a storage backend.

    Args:
        path: JSON file location, or None for an in-memory store.

    Returns:
        JsonFileStorage when a path is given, otherwise InMemoryStorage.
    """
    if path is None:
        return InMemoryStorage()
    return JsonFileStorage(path)


__all__ = [
    "BrowserStorage",
    "create_storage",
    "InMemoryStorage",
    "JsonFileStorage",
]
