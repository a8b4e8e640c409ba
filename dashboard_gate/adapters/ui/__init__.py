"""UI ports and headless implementations."""

from dashboard_gate.adapters.ui.base import DialogView, Navigator, NoticeLevel, Notifier
from dashboard_gate.adapters.ui.recording import (
    Notice,
    RecordingDialogView,
    RecordingNavigator,
    RecordingNotifier,
)

__all__ = [
    "DialogView",
    "Navigator",
    "Notice",
    "NoticeLevel",
    "Notifier",
    "RecordingDialogView",
    "RecordingNavigator",
    "RecordingNotifier",
]
