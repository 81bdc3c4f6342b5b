"""Publish/subscribe registry for pushing payroll events to viewers."""
from __future__ import annotations

import itertools
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Subscriber = Callable[[str, dict[str, Any]], None]


class Broadcaster:
    """Fan-out of named events to every subscribed viewer.

    Subscribers must not block; a subscriber that raises is logged and the
    remaining subscribers still receive the event.
    """

    def __init__(self) -> None:
        self._subscribers: dict[int, Subscriber] = {}
        self._ids = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` and return the handle that removes it."""

        subscription_id = next(self._ids)
        self._subscribers[subscription_id] = callback

        def unsubscribe() -> None:
            self._subscribers.pop(subscription_id, None)

        return unsubscribe

    def publish(self, event: str, payload: dict[str, Any]) -> int:
        delivered = 0
        for subscription_id, callback in list(self._subscribers.items()):
            try:
                callback(event, payload)
            except Exception:
                logger.exception("Subscriber %s failed to receive %s", subscription_id, event)
                continue
            delivered += 1
        return delivered
