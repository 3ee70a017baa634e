"""Notifier port: best-effort customer notifications."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class NotifyResult:
    ok: bool
    reason: str | None = None


class Notifier(ABC):
    """Abstract interface for notification adapters."""

    @abstractmethod
    def notify(
        self,
        recipient_id: str,
        title: str,
        message: str,
        meta: dict | None = None,
    ) -> NotifyResult:
        """Deliver a notification to ``recipient_id``.

        Adapters report failure through the result instead of raising.
        """
        ...
