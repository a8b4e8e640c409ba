"""Headless UI port implementations.

They log every call and keep a history, which is what a headless session
(or a test) needs to observe the dashboard's effects.
"""

from dataclasses import dataclass, field

import structlog

from dashboard_gate.adapters.ui.base import DialogView, Navigator, NoticeLevel, Notifier

logger = structlog.get_logger()


@dataclass
class Notice:
    level: NoticeLevel
    message: str


@dataclass
class RecordingNotifier(Notifier):
    """Notifier that logs and records notices."""

    notices: list[Notice] = field(default_factory=list)

    def notify(self, level: NoticeLevel, message: str) -> None:
        logger.info("notice", level=level.value, message=message)
        self.notices.append(Notice(level=level, message=message))

    def messages(self, level: NoticeLevel | None = None) -> list[str]:
        """Recorded messages, optionally filtered by level."""
        return [n.message for n in self.notices if level is None or n.level == level]


@dataclass
class RecordingNavigator(Navigator):
    """Navigator that logs and records visited paths."""

    paths: list[str] = field(default_factory=list)

    def navigate(self, path: str) -> None:
        logger.info("navigate", path=path)
        self.paths.append(path)

    @property
    def current_path(self) -> str | None:
        return self.paths[-1] if self.paths else None


@dataclass
class RecordingDialogView(DialogView):
    """DialogView that tracks visibility and each change."""

    visible: bool = False
    changes: list[bool] = field(default_factory=list)

    def set_visible(self, visible: bool) -> None:
        if visible != self.visible:
            logger.info("dialog_visibility", visible=visible)
            self.changes.append(visible)
        self.visible = visible

    @property
    def times_shown(self) -> int:
        return sum(1 for change in self.changes if change)
