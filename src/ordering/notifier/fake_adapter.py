"""Fake notifier: records notifications in memory for test assertions."""

from ordering.notifier.port import Notifier, NotifyResult


class FakeNotifier(Notifier):
    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notification delivery failed") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def notify(
        self,
        recipient_id: str,
        title: str,
        message: str,
        meta: dict | None = None,
    ) -> NotifyResult:
        if not self.should_succeed:
            return NotifyResult(ok=False, reason=self.failure_reason)

        self.sent.append(
            {
                "recipient_id": recipient_id,
                "title": title,
                "message": message,
                "meta": meta or {},
            }
        )
        return NotifyResult(ok=True)
