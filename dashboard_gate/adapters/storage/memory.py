"""In-memory storage backend.

Used by tests and by sessions that run without a storage file.
"""

from dashboard_gate.adapters.storage.base import BrowserStorage


class InMemoryStorage(BrowserStorage):
    """Dict-backed BrowserStorage.

    Safe for single-threaded asyncio use only.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
