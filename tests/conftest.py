"""Shared fixtures for dashboard gate tests.

Provides a fixed evaluation time, in-memory storage, recording UI ports, and
a user factory that builds UserProfile objects from camelCase payloads.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from dashboard_gate.adapters.storage.memory import InMemoryStorage
from dashboard_gate.adapters.ui.recording import (
    RecordingDialogView,
    RecordingNavigator,
    RecordingNotifier,
)
from dashboard_gate.schemas.user import UserProfile
from dashboard_gate.services.completion_store import PersistedCompletionStore

FIXED_NOW = datetime(2026, 3, 2, 9, 30, tzinfo=UTC)

# Complete employer profile; tests override or blank fields as needed
_BASE_USER: dict[str, Any] = {
    "id": "u-100",
    "email": "owner@acme.test",
    "userType": "employer",
    "phone": "+15550100",
    "designation": "Hiring Manager",
    "companyId": "c-1",
    "preferences": {},
}


def build_user(**overrides: Any) -> UserProfile:
    """Build a UserProfile from the base payload plus camelCase overrides."""
    return UserProfile.model_validate({**_BASE_USER, **overrides})


@pytest.fixture
def now() -> datetime:
    """Fixed, timezone-aware evaluation time."""
    return FIXED_NOW


@pytest.fixture
def make_user() -> Callable[..., UserProfile]:
    """Factory for user snapshots (see build_user)."""
    return build_user


@pytest.fixture
def storage() -> InMemoryStorage:
    """Empty in-memory storage for each test."""
    return InMemoryStorage()


@pytest.fixture
def store(storage: InMemoryStorage) -> PersistedCompletionStore:
    """Completion store over the per-test storage."""
    return PersistedCompletionStore(storage)


@pytest.fixture
def dialog() -> RecordingDialogView:
    return RecordingDialogView()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()
