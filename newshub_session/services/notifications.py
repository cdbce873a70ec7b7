"""Notification sinks for session feedback (success and failure messages)"""

from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console
from rich.panel import Panel

from ..models.user import Notification
from ..utils.logger import get_logger

logger = get_logger(__name__)

_STYLES = {
    "success": "green",
    "error": "red",
    "info": "cyan",
}


class Notifier(ABC):
    """Base notification sink"""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        ...


class LogNotifier(Notifier):
    """Sends notifications to the log (default when no UI is attached)"""

    def notify(self, notification: Notification) -> None:
        if notification.severity == "error":
            logger.warning(notification.title, description=notification.description)
        else:
            logger.info(notification.title, description=notification.description)


class ConsoleNotifier(Notifier):
    """Prints notifications as rich panels"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def notify(self, notification: Notification) -> None:
        style = _STYLES.get(notification.severity, "cyan")
        self.console.print(
            Panel(
                notification.description,
                title=f"[bold {style}]{notification.title}[/bold {style}]",
                border_style=style,
            )
        )
