from __future__ import annotations

from typing import Protocol

from .model import NotificationPayload, NotificationResult


class Notifier(Protocol):
    """Delivers an attendance alert to the parent and the student.

    Contract: never raises; every failure is reported in the returned
    NotificationResult.
    """

    def notify(self, payload: NotificationPayload) -> NotificationResult:
        raise NotImplementedError
