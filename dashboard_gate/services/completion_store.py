"""Persisted profile-completion record.

A small JSON record under the ``profileCompleted`` storage key remembers
that the server confirmed a completed profile, so a stale or slow user
payload does not re-open the completion dialog.

A record is honored only when it says ``completed: true``, was written for
the same user type, and is younger than the TTL (30 days). Anything else
found under the key (expired, mismatched, malformed, unreadable) is purged
on read and reported as absent. Store methods never raise.
"""

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from dashboard_gate.adapters.storage.base import BrowserStorage
from dashboard_gate.core.errors import StorageError

logger = logging.getLogger(__name__)

# Storage keys shared with the web client
PROFILE_COMPLETED_KEY = "profileCompleted"
USER_KEY = "user"

DEFAULT_COMPLETION_TTL = timedelta(days=30)


def to_epoch_millis(moment: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return int(moment.timestamp() * 1000)


@dataclass(frozen=True)
class CompletionRecord:
    """Client-side record of a server-confirmed completed profile.

    Attributes:
        completed: Always True for records written by this store.
        timestamp: Write time in epoch milliseconds.
        user_type: User type the record was written for.
    """

    completed: bool
    timestamp: int
    user_type: str

    @classmethod
    def for_user(cls, user_type: str, now: datetime) -> "CompletionRecord":
        return cls(completed=True, timestamp=to_epoch_millis(now), user_type=user_type)

    @classmethod
    def from_json(cls, raw: str) -> "CompletionRecord":
        """Parse the stored JSON form.

        Raises:
            ValueError: If raw is not a well-formed record.
        """
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("completion record must be a JSON object")

        completed = data.get("completed")
        timestamp = data.get("timestamp")
        user_type = data.get("userType")
        if not isinstance(completed, bool):
            raise ValueError("completion record 'completed' must be a boolean")
        if isinstance(timestamp, bool) or not isinstance(timestamp, int | float):
            raise ValueError("completion record 'timestamp' must be a number")
        if not isinstance(user_type, str):
            raise ValueError("completion record 'userType' must be a string")

        return cls(completed=completed, timestamp=int(timestamp), user_type=user_type)

    def to_json(self) -> str:
        return json.dumps(
            {
                "completed": self.completed,
                "timestamp": self.timestamp,
                "userType": self.user_type,
            }
        )

    def age(self, now: datetime) -> timedelta:
        return timedelta(milliseconds=to_epoch_millis(now) - self.timestamp)

    def is_honored(self, user_type: str, now: datetime, ttl: timedelta) -> bool:
        """Whether this record may suppress the dialog for user_type at now."""
        return (
            self.completed is True
            and self.user_type == user_type
            and self.age(now) < ttl
        )


class PersistedCompletionStore:
    """Read/write access to the completion record.

    Args:
        storage: Key/value backend holding the record.
        ttl: Maximum age of an honored record.
    """

    def __init__(
        self,
        storage: BrowserStorage,
        ttl: timedelta = DEFAULT_COMPLETION_TTL,
    ) -> None:
        self._storage = storage
        self._ttl = ttl

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def read(
        self, user_type: str, now: datetime | None = None
    ) -> CompletionRecord | None:
        """Return the record if it is honored for user_type.

        Expired, mismatched, malformed, or unreadable records are deleted.

        Args:
            user_type: Type of the user being evaluated.
            now: Evaluation time. Defaults to the current time.

        Returns:
            The honored record, or None.
        """
        now = now or datetime.now(UTC)

        try:
            raw = self._storage.get_item(PROFILE_COMPLETED_KEY)
        except StorageError:
            logger.warning("Completion record unreadable, clearing", exc_info=True)
            self.clear()
            return None

        if raw is None:
            return None

        try:
            record = CompletionRecord.from_json(raw)
        except ValueError:
            logger.warning("Malformed completion record, clearing")
            self.clear()
            return None

        if not record.is_honored(user_type, now, self._ttl):
            logger.info(
                "Discarding completion record (user_type=%s, stored=%s, age=%s)",
                user_type,
                record.user_type,
                record.age(now),
            )
            self.clear()
            return None

        return record

    def write(self, record: CompletionRecord) -> bool:
        """Persist record, replacing any previous one.

        Returns:
            True if the record was written.
        """
        try:
            self._storage.set_item(PROFILE_COMPLETED_KEY, record.to_json())
        except StorageError:
            logger.warning("Failed to write completion record", exc_info=True)
            return False
        return True

    def clear(self) -> None:
        """Delete the record.

        If the backend is too damaged to remove a single key, the whole
        backend is reset.
        """
        try:
            self._storage.remove_item(PROFILE_COMPLETED_KEY)
            return
        except StorageError:
            logger.warning("Failed to remove completion record, resetting storage")

        try:
            self._storage.clear()
        except StorageError:
            logger.error("Failed to reset storage", exc_info=True)
