"""Tests for the persisted profile-completion record.

Covers:
- CompletionRecord: JSON parsing, serialization, honor rules
- read: honored record, TTL expiry, user-type isolation, purge on mismatch
- read/write/clear when the storage backend fails
"""

import json
from datetime import datetime, timedelta

import pytest

from dashboard_gate.adapters.storage.base import BrowserStorage
from dashboard_gate.adapters.storage.memory import InMemoryStorage
from dashboard_gate.core.errors import StorageError
from dashboard_gate.services.completion_store import (
    DEFAULT_COMPLETION_TTL,
    PROFILE_COMPLETED_KEY,
    CompletionRecord,
    PersistedCompletionStore,
    to_epoch_millis,
)

# =============================================================================
# Helpers
# =============================================================================


def _stored_record(
    storage: BrowserStorage,
    *,
    written_at: datetime,
    user_type: str = "employer",
    completed: bool = True,
) -> None:
    """Put a raw completion record into storage."""
    storage.set_item(
        PROFILE_COMPLETED_KEY,
        json.dumps(
            {
                "completed": completed,
                "timestamp": to_epoch_millis(written_at),
                "userType": user_type,
            }
        ),
    )


class _BrokenStorage(InMemoryStorage):
    """Storage whose operations can be made to fail individually."""

    def __init__(self, **failures: bool) -> None:
        super().__init__()
        self.failures = failures
        self.cleared = False

    def _maybe_fail(self, op: str) -> None:
        if self.failures.get(op):
            raise StorageError(f"{op} failed")

    def get_item(self, key: str) -> str | None:
        self._maybe_fail("get")
        return super().get_item(key)

    def set_item(self, key: str, value: str) -> None:
        self._maybe_fail("set")
        super().set_item(key, value)

    def remove_item(self, key: str) -> None:
        self._maybe_fail("remove")
        super().remove_item(key)

    def clear(self) -> None:
        self._maybe_fail("clear")
        self.cleared = True
        super().clear()


# =============================================================================
# CompletionRecord
# =============================================================================


class TestCompletionRecord:
    """JSON form and honor rules."""

    def test_for_user_marks_completed(self, now: datetime) -> None:
        record = CompletionRecord.for_user("employer", now)
        assert record.completed is True
        assert record.timestamp == to_epoch_millis(now)
        assert record.user_type == "employer"

    def test_to_json_uses_wire_keys(self, now: datetime) -> None:
        data = json.loads(CompletionRecord.for_user("admin", now).to_json())
        assert data == {
            "completed": True,
            "timestamp": to_epoch_millis(now),
            "userType": "admin",
        }

    def test_from_json_accepts_float_timestamp(self) -> None:
        record = CompletionRecord.from_json(
            '{"completed": true, "timestamp": 1700000000000.0, "userType": "employer"}'
        )
        assert record.timestamp == 1700000000000

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "[]",
            "true",
            '{"completed": "yes", "timestamp": 1, "userType": "employer"}',
            '{"completed": true, "userType": "employer"}',
            '{"completed": true, "timestamp": true, "userType": "employer"}',
            '{"completed": true, "timestamp": "1", "userType": "employer"}',
            '{"completed": true, "timestamp": 1, "userType": 3}',
        ],
    )
    def test_from_json_rejects_malformed(self, raw: str) -> None:
        with pytest.raises(ValueError):
            CompletionRecord.from_json(raw)

    def test_honored_within_ttl(self, now: datetime) -> None:
        record = CompletionRecord.for_user("employer", now - timedelta(days=29))
        assert record.is_honored("employer", now, DEFAULT_COMPLETION_TTL)

    def test_not_honored_at_ttl(self, now: datetime) -> None:
        """A record exactly TTL old has expired."""
        record = CompletionRecord.for_user("employer", now - timedelta(days=30))
        assert not record.is_honored("employer", now, DEFAULT_COMPLETION_TTL)

    def test_not_honored_for_other_user_type(self, now: datetime) -> None:
        record = CompletionRecord.for_user("employer", now)
        assert not record.is_honored("admin", now, DEFAULT_COMPLETION_TTL)

    def test_not_honored_when_not_completed(self, now: datetime) -> None:
        record = CompletionRecord(
            completed=False, timestamp=to_epoch_millis(now), user_type="employer"
        )
        assert not record.is_honored("employer", now, DEFAULT_COMPLETION_TTL)


# =============================================================================
# PersistedCompletionStore.read
# =============================================================================


class TestRead:
    """Honored records are returned; anything else is purged."""

    def test_empty_storage(self, store: PersistedCompletionStore) -> None:
        assert store.read("employer") is None

    def test_returns_honored_record(
        self, storage: InMemoryStorage, store: PersistedCompletionStore, now: datetime
    ) -> None:
        _stored_record(storage, written_at=now - timedelta(days=1))
        record = store.read("employer", now)
        assert record is not None
        assert record.user_type == "employer"

    def test_expired_record_is_purged(
        self, storage: InMemoryStorage, store: PersistedCompletionStore, now: datetime
    ) -> None:
        _stored_record(storage, written_at=now - timedelta(days=31))
        assert store.read("employer", now) is None
        assert storage.get_item(PROFILE_COMPLETED_KEY) is None

    @pytest.mark.parametrize(
        ("stored_type", "reader_type"),
        [("employer", "admin"), ("admin", "employer")],
    )
    def test_user_type_mismatch_is_purged(
        self,
        storage: InMemoryStorage,
        store: PersistedCompletionStore,
        now: datetime,
        stored_type: str,
        reader_type: str,
    ) -> None:
        _stored_record(storage, written_at=now, user_type=stored_type)
        assert store.read(reader_type, now) is None
        assert storage.get_item(PROFILE_COMPLETED_KEY) is None

    def test_not_completed_record_is_purged(
        self, storage: InMemoryStorage, store: PersistedCompletionStore, now: datetime
    ) -> None:
        _stored_record(storage, written_at=now, completed=False)
        assert store.read("employer", now) is None
        assert storage.get_item(PROFILE_COMPLETED_KEY) is None

    def test_malformed_record_is_purged(
        self, storage: InMemoryStorage, store: PersistedCompletionStore
    ) -> None:
        storage.set_item(PROFILE_COMPLETED_KEY, "{oops")
        storage.set_item("user", '{"id": "u-1"}')

        assert store.read("employer") is None
        assert storage.get_item(PROFILE_COMPLETED_KEY) is None
        assert storage.get_item("user") == '{"id": "u-1"}'

    def test_custom_ttl(self, storage: InMemoryStorage, now: datetime) -> None:
        store = PersistedCompletionStore(storage, ttl=timedelta(hours=1))
        _stored_record(storage, written_at=now - timedelta(hours=2))
        assert store.ttl == timedelta(hours=1)
        assert store.read("employer", now) is None

    def test_unreadable_storage_is_reset(self) -> None:
        storage = _BrokenStorage(get=True, remove=True)
        store = PersistedCompletionStore(storage)
        assert store.read("employer") is None
        assert storage.cleared is True


# =============================================================================
# write / clear
# =============================================================================


class TestWriteAndClear:
    def test_write_then_read(self, store: PersistedCompletionStore, now: datetime) -> None:
        assert store.write(CompletionRecord.for_user("employer", now)) is True
        assert store.read("employer", now) == CompletionRecord.for_user(
            "employer", now
        )

    def test_write_replaces_previous_record(
        self, store: PersistedCompletionStore, now: datetime
    ) -> None:
        store.write(CompletionRecord.for_user("employer", now))
        store.write(CompletionRecord.for_user("admin", now))
        assert store.read("admin", now) is not None

    def test_write_failure_returns_false(self, now: datetime) -> None:
        store = PersistedCompletionStore(_BrokenStorage(set=True))
        assert store.write(CompletionRecord.for_user("employer", now)) is False

    def test_clear_removes_only_the_record(
        self, storage: InMemoryStorage, store: PersistedCompletionStore, now: datetime
    ) -> None:
        store.write(CompletionRecord.for_user("employer", now))
        storage.set_item("user", "{}")
        store.clear()
        assert storage.get_item(PROFILE_COMPLETED_KEY) is None
        assert storage.get_item("user") == "{}"

    def test_clear_falls_back_to_full_reset(self) -> None:
        storage = _BrokenStorage(remove=True)
        PersistedCompletionStore(storage).clear()
        assert storage.cleared is True

    def test_clear_never_raises(self) -> None:
        storage = _BrokenStorage(remove=True, clear=True)
        PersistedCompletionStore(storage).clear()
        assert storage.cleared is False
