from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """User-visible notifications (toasts in a UI)."""

    def success(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Default implementation writing notifications to the log."""

    def success(self, message: str) -> None:
        logger.info("%s", message)

    def error(self, message: str) -> None:
        logger.error("%s", message)
