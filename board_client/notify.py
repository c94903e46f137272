from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class SessionExpiryNotifier(Protocol):
    async def notify_expired(self) -> None: ...


class LoggingExpiryNotifier:
    def __init__(self, login_hint: str = "Please sign in again."):
        self._login_hint = login_hint

    async def notify_expired(self) -> None:
        logger.warning("Session expired. %s", self._login_hint)


class CallbackExpiryNotifier:
    """Adapts a plain or async callable, e.g. a dialog followed by navigation."""

    def __init__(self, callback: Callable[[], Any]):
        self._callback = callback

    async def notify_expired(self) -> None:
        outcome = self._callback()
        if inspect.isawaitable(outcome):
            await outcome
