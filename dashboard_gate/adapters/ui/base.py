"""UI ports driven by the dashboard services.

The services never render anything themselves. They report what the user
should see through these interfaces, which the hosting UI implements.
"""

from abc import ABC, abstractmethod
from enum import Enum


class NoticeLevel(str, Enum):
    """Toast severity."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class Notifier(ABC):
    """Shows short, non-blocking messages (toasts)."""

    @abstractmethod
    def notify(self, level: NoticeLevel, message: str) -> None:
        """Display message at the given severity."""
        ...


class Navigator(ABC):
    """Moves the user to another dashboard route."""

    @abstractmethod
    def navigate(self, path: str) -> None:
        """Navigate to path (e.g., "/employer-dashboard/kyc-verification")."""
        ...


class DialogView(ABC):
    """The profile-completion dialog."""

    @abstractmethod
    def set_visible(self, visible: bool) -> None:
        """Open or close the dialog."""
        ...
