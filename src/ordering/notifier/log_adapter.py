"""Default notifier: writes the would-be notification to the log."""

import structlog

from ordering.notifier.port import Notifier, NotifyResult

logger = structlog.get_logger(__name__)


class LogNotifier(Notifier):
    def notify(
        self,
        recipient_id: str,
        title: str,
        message: str,
        meta: dict | None = None,
    ) -> NotifyResult:
        logger.info(
            "notification.sent",
            recipient_id=recipient_id,
            title=title,
            message=message,
            **(meta or {}),
        )
        return NotifyResult(ok=True)
