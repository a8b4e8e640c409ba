"""JSON file storage backend.

The whole store is one JSON object on disk. Every write rewrites the file
through a temporary sibling and an atomic rename.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from dashboard_gate.adapters.storage.base import BrowserStorage
from dashboard_gate.core.errors import StorageError

logger = logging.getLogger(__name__)


class JsonFileStorage(BrowserStorage):
    """BrowserStorage persisted to a single JSON file.

    A missing file is an empty store. A file that is not a JSON object of
    strings raises StorageError on read.

    Args:
        path: Location of the JSON file. Parent directories are created on
            first write.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Cannot read storage file {self._path}") from e

        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Storage file {self._path} is not valid JSON") from e

        if not isinstance(data, dict) or not all(
            isinstance(v, str) for v in data.values()
        ):
            raise StorageError(f"Storage file {self._path} is not a string map")
        return data

    def _save(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, ensure_ascii=False, sort_keys=True)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write storage file {self._path}") from e

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)

    def clear(self) -> None:
        """Delete every key.

        Works on a corrupt file too, so it can be used for recovery.
        """
        logger.debug("Clearing storage file %s", self._path)
        self._save({})
