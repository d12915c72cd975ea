"""
User-visible notifications using Rich.

Provider errors are shown once per distinct message so a failing server does
not flood the terminal on every keystroke.
"""

import logging
from typing import Optional, Set

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)

_STYLES = {
    logging.ERROR: "bold red",
    logging.WARNING: "yellow",
    logging.INFO: "cyan",
}


class Notifier:
    """Notification channel for messages the user should see."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self._seen: Set[str] = set()

    def notify(self, message: str, level: int = logging.INFO) -> None:
        logger.log(level, message)
        style = _STYLES.get(level, "")
        self.console.print(f"[{style}]{escape(message)}[/{style}]" if style else escape(message))

    def notify_once(self, message: str, level: int = logging.INFO) -> bool:
        """
        Show ``message`` unless it was already shown.

        Returns:
            True if the message was shown
        """
        if message in self._seen:
            return False
        self._seen.add(message)
        self.notify(message, level)
        return True
