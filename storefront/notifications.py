"""User-facing notifications (the storefront's toast channel)"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class NotificationVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass
class Notification:
    """A short message shown to the shopper"""
    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_error(self) -> bool:
        return self.variant == NotificationVariant.DESTRUCTIVE


class Notifier:
    """Collects notifications and fans them out to subscribers"""

    def __init__(self, max_history: int = 50):
        self.max_history = max_history
        self.history: list[Notification] = []
        self._listeners: list[Callable[[Notification], None]] = []

    def subscribe(self, listener: Callable[[Notification], None]) -> Callable[[], None]:
        """Register a listener; returns a function that removes it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(
        self,
        title: str,
        description: str,
        variant: NotificationVariant = NotificationVariant.DEFAULT,
    ) -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self.history.append(notification)
        del self.history[:-self.max_history]

        log = logger.warning if notification.is_error else logger.info
        log(f"{title}: {description}")

        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception:
                logger.exception(f"Notification listener failed for '{title}'")
        return notification

    def error(self, title: str, description: str) -> Notification:
        return self.notify(title, description, NotificationVariant.DESTRUCTIVE)

    @property
    def last(self):
        return self.history[-1] if self.history else None
