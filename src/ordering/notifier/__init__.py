"""Notifier factory.

Provides get_notifier() / set_notifier() to swap implementations:
- LogNotifier by default
- FakeNotifier in tests
"""

import structlog

from ordering.notifier.log_adapter import LogNotifier
from ordering.notifier.port import Notifier, NotifyResult

logger = structlog.get_logger(__name__)

_current_notifier: Notifier | None = None


def get_notifier() -> Notifier:
    """Return the current notifier. Defaults to LogNotifier."""
    global _current_notifier
    if _current_notifier is None:
        _current_notifier = LogNotifier()
    return _current_notifier


def set_notifier(notifier: Notifier) -> None:
    global _current_notifier
    _current_notifier = notifier


def reset_notifier() -> None:
    global _current_notifier
    _current_notifier = None


def send_notification(recipient_id: str, title: str, message: str, order_id: str) -> NotifyResult:
    """Best-effort delivery: a failure is logged, never raised."""
    try:
        result = get_notifier().notify(
            recipient_id=recipient_id,
            title=title,
            message=message,
            meta={"order_id": order_id},
        )
    except Exception as exc:
        result = NotifyResult(ok=False, reason=str(exc))
    if not result.ok:
        logger.warning(
            "notification.failed",
            order_id=order_id,
            recipient_id=recipient_id,
            reason=result.reason,
        )
    return result


def notify_customer(order, title: str, message: str) -> NotifyResult:
    return send_notification(str(order.customer_id), title, message, order_id=str(order.id))
