"""Fake notifier — records sent messages for testing."""

from shop.notifications.port import NotificationPort


class FakeNotifier(NotificationPort):
    """Notifier that records messages in memory for test assertions."""

    def __init__(self, admin_id: str | None = None):
        super().__init__(admin_id=admin_id)
        self.sent_messages: list[dict] = []
        self.should_succeed = True
        self.failing_recipients: set[str] = set()

    def configure(self, should_succeed: bool = True, failing_recipients=()):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failing_recipients = {str(recipient) for recipient in failing_recipients}

    def send(self, recipient_id: str, text: str) -> bool:
        if not self.should_succeed or str(recipient_id) in self.failing_recipients:
            return False

        self.sent_messages.append({"recipient_id": str(recipient_id), "text": text})
        return True

    def messages_to(self, recipient_id) -> list[str]:
        return [m["text"] for m in self.sent_messages if m["recipient_id"] == str(recipient_id)]

    def reset(self):
        """Clear sent messages (useful between tests)."""
        self.sent_messages.clear()
        self.should_succeed = True
        self.failing_recipients = set()
