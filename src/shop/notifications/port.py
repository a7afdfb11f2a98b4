"""Notification port — best-effort outbound messages to customers and the administrator."""

from abc import ABC, abstractmethod

from shop.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationPort(ABC):
    """Abstract interface for message delivery adapters.

    Adapters implement ``send``. Delivery is best effort: ``notify_user``
    and ``notify_admin`` report failures through their return value and
    never raise, so a broken transport cannot undo a committed operation.
    """

    def __init__(self, admin_id: str | None = None):
        self.admin_id = admin_id

    @abstractmethod
    def send(self, recipient_id: str, text: str) -> bool:
        """Deliver ``text`` to ``recipient_id``. Returns False when delivery failed."""
        ...

    def notify_user(self, customer_id, text: str) -> bool:
        return self._deliver(str(customer_id), text)

    def notify_admin(self, text: str) -> bool:
        if not self.admin_id:
            logger.debug("No administrator configured, notification dropped")
            return False
        return self._deliver(self.admin_id, text)

    def _deliver(self, recipient_id: str, text: str) -> bool:
        try:
            delivered = self.send(recipient_id, text)
        except Exception as exc:
            logger.error("Notification delivery raised", recipient_id=recipient_id, error=str(exc))
            return False

        if not delivered:
            logger.warning("Notification not delivered", recipient_id=recipient_id)
        return bool(delivered)
