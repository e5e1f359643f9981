"""
Event records and publish/subscribe channels owned by a machine engine.

Delivery is synchronous, on the publishing call, in subscription order.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Tuple, TypeVar

import structlog

logger = structlog.get_logger(__name__)

EventT = TypeVar("EventT")


@dataclass(frozen=True)
class TransitionEvent:
    """Emitted once per committed transition."""

    from_state: str
    to_state: str
    from_payload: Any
    to_payload: Any


@dataclass(frozen=True)
class TriggerInvokedEvent:
    """Emitted once per accepted trigger invocation, before the transition function runs."""

    state: str
    payload: Any
    trigger: str
    args: Tuple[Any, ...] = ()


class Subscription:
    """Cancellation handle returned by ``EventChannel.subscribe``."""

    def __init__(self, channel: "EventChannel", callback: Callable[[Any], None]):
        self._channel = channel
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        """Unregister this subscriber only. Calling it again is a no-op."""
        if self.active:
            self.active = False
            self._channel._remove(self)

    __call__ = cancel


class EventChannel(Generic[EventT]):
    """One named channel with any number of subscribers."""

    def __init__(self, name: str):
        self.name = name
        self._subscriptions: List[Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: Callable[[EventT], None]) -> Subscription:
        if not callable(callback):
            raise TypeError(f"Subscriber for channel {self.name!r} must be callable")
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def publish(self, event: EventT) -> None:
        """
        Deliver an event to every current subscriber.

        Subscribers added during delivery only receive later events.
        A failing subscriber is logged and does not stop delivery to the others.
        """
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            try:
                subscription.callback(event)
            except Exception as e:
                logger.exception(
                    "event_subscriber_failed",
                    channel=self.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )

    def clear(self) -> None:
        for subscription in self._subscriptions:
            subscription.active = False
        self._subscriptions.clear()

    def _remove(self, subscription: Subscription) -> None:
        # identity match: the same callback may be subscribed more than once
        for i, existing in enumerate(self._subscriptions):
            if existing is subscription:
                del self._subscriptions[i]
                return
