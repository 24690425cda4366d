from __future__ import annotations

import asyncio
import logging
from typing import List, Sequence, Union

from .model import NotificationOutcome, NotificationPayload, NotificationResult
from .notifier import Notifier

logger = logging.getLogger(__name__)

Settled = Union[NotificationResult, BaseException]


async def _gather(notifier: Notifier, payloads: Sequence[NotificationPayload]) -> List[Settled]:
    return await asyncio.gather(
        *(asyncio.to_thread(notifier.notify, payload) for payload in payloads),
        return_exceptions=True,
    )


def dispatch_all(notifier: Notifier, payloads: Sequence[NotificationPayload]) -> List[Settled]:
    """Run one notify() per payload concurrently and wait for all of them.

    Results come back in payload order. A task that raised yields its
    exception instead of a result; the other tasks are not cancelled.
    """
    if not payloads:
        return []
    return asyncio.run(_gather(notifier, payloads))


def as_result(payload: NotificationPayload, settled: Settled) -> NotificationResult:
    """Normalize a settled task: an exception fails every addressed channel."""
    if isinstance(settled, NotificationResult):
        return settled

    logger.error("Notifier raised for student %s: %s", payload.student_id, settled)
    error = str(settled) or settled.__class__.__name__
    return NotificationResult.all_failed(payload, error)


def tally(payloads: Sequence[NotificationPayload], settled: Sequence[Settled]) -> NotificationOutcome:
    outcome = NotificationOutcome()
    for payload, item in zip(payloads, settled):
        outcome = outcome.add(as_result(payload, item))
    return outcome
