"""Logging notifier — writes outbound messages to the application log.

Used when no messaging transport is wired in, e.g. when the HTTP ingress
runs on its own.
"""

from shop.notifications.port import NotificationPort
from shop.utils.logging import get_logger

logger = get_logger(__name__)


class LoggingNotifier(NotificationPort):
    def send(self, recipient_id: str, text: str) -> bool:
        logger.info("Outbound message", recipient_id=recipient_id, text=text)
        return True
