"""
Event Bus - Pub/sub messaging between framework components.

This module implements:
- Subscription by event name with an integer id per subscription
- Priority-based dispatch (higher priority = earlier execution)
- One-shot subscriptions removed as their first dispatch starts
- Isolated callbacks: a failing subscriber is reported through the log
  sink and never stops dispatch to the remaining subscribers

Example:
    bus = EventBus()
    sub_id = bus.on("plugin:loaded", lambda data: print(data["name"]), priority=10)
    bus.emit("plugin:loaded", {"name": "telescope"})
    bus.off(sub_id)
"""

import itertools
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from nvcore.core.notify import LogSink, Severity, logging_sink


class EventBusError(Exception):
    """Base exception for event bus errors."""

    pass


class SubscriptionError(EventBusError):
    """Raised when a subscription request is malformed."""

    pass


# Shared by every bus so subscription ids are unique within the process
_subscription_ids = itertools.count(1)


@dataclass
class Subscription:
    """
    Represents a registered event callback.

    Attributes:
        id: Process-unique subscription id (monotonically increasing)
        event: Event name this subscription listens to
        callback: Function called with the event payload
        once: Remove after the first dispatch
        priority: Higher priority executes first
    """

    id: int
    event: str
    callback: Callable[[Any], Any]
    once: bool = False
    priority: int = 0


class EventBus:
    """
    Synchronous event bus with priority ordering.

    Subscriptions are stored per event name in registration order. Ties in
    priority dispatch in registration order.
    """

    def __init__(self, sink: LogSink | None = None):
        """
        Initialize EventBus.

        Args:
            sink: Diagnostic sink for callback failures (default: logging)
        """
        self._sink = sink or logging_sink
        self._subscriptions: dict[str, dict[int, Subscription]] = {}

    def on(
        self,
        event_name: str,
        callback: Callable[[Any], Any],
        *,
        once: bool = False,
        priority: int = 0,
    ) -> int:
        """
        Subscribe to an event.

        Args:
            event_name: Event name to subscribe to
            callback: Function called with the payload on emit
            once: Only call callback once, then auto-unsubscribe
            priority: Higher priority callbacks run first

        Returns:
            Subscription id (use with off() to unsubscribe)

        Raises:
            SubscriptionError: If event_name is empty or callback is not callable
        """
        if not isinstance(event_name, str) or not event_name:
            raise SubscriptionError("Event name must be a non-empty string")
        if not callable(callback):
            raise SubscriptionError("Callback must be callable")
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise SubscriptionError(f"Priority must be an integer, got {priority!r}")

        subscription = Subscription(
            id=next(_subscription_ids),
            event=event_name,
            callback=callback,
            once=bool(once),
            priority=priority,
        )
        self._subscriptions.setdefault(event_name, {})[subscription.id] = subscription
        return subscription.id

    def subscriber(self, event_name: str, *, priority: int = 0, once: bool = False):
        """
        Decorator form of on().

        Example:
            @bus.subscriber("setup:complete", priority=10)
            def announce(data):
                ...
        """

        def decorator(func: Callable) -> Callable:
            self.on(event_name, func, once=once, priority=priority)
            return func

        return decorator

    def emit(self, event_name: str, data: Any = None) -> int:
        """
        Emit an event, calling all subscribed callbacks.

        Callbacks run in priority order over a snapshot of the current
        subscriptions. Failures are reported and dispatch continues. One-shot
        subscriptions are removed just before their callback runs, so a
        re-entrant emit of the same event never calls them twice.

        Args:
            event_name: Event name to emit
            data: Payload passed to every callback

        Returns:
            Number of callbacks invoked
        """
        subscriptions = self._subscriptions.get(event_name)
        if not subscriptions:
            return 0

        ordered = sorted(subscriptions.values(), key=lambda s: (-s.priority, s.id))

        invoked = 0
        for subscription in ordered:
            if subscription.once:
                # Claimed before the call so a nested emit cannot run it again
                bucket = self._subscriptions.get(event_name)
                if bucket is None or bucket.pop(subscription.id, None) is None:
                    continue

            invoked += 1
            try:
                subscription.callback(data)
            except Exception as e:
                self._sink(
                    f'Error in event callback for "{event_name}": {e}',
                    Severity.ERROR,
                )

        return invoked

    def off(self, identifier: int | str) -> bool:
        """
        Unsubscribe by subscription id or by event name.

        Args:
            identifier: Subscription id (removes one callback) or event name
                (removes every callback for that event)

        Returns:
            True if anything was removed
        """
        if isinstance(identifier, bool):
            return False

        if isinstance(identifier, int):
            for subscriptions in self._subscriptions.values():
                if identifier in subscriptions:
                    del subscriptions[identifier]
                    return True
            return False

        if isinstance(identifier, str):
            return self._subscriptions.pop(identifier, None) is not None

        return False

    def clear(self, event_name: str | None = None) -> None:
        """
        Clear subscriptions for one event, or for all events.

        Args:
            event_name: Event to clear (None clears everything)
        """
        if event_name is None:
            self._subscriptions = {}
        else:
            self._subscriptions.pop(event_name, None)

    def get_subscribers(
        self, event_name: str | None = None
    ) -> list[Subscription] | dict[str, list[Subscription]]:
        """
        Get subscribers for introspection.

        Returned subscriptions are copies; changing them does not affect
        the bus.

        Args:
            event_name: Event to inspect (None returns every event)

        Returns:
            List of subscriptions for event_name, or a mapping of
            event name -> subscriptions
        """
        if event_name is not None:
            return [replace(s) for s in self._subscriptions.get(event_name, {}).values()]

        return {
            name: [replace(s) for s in subscriptions.values()]
            for name, subscriptions in self._subscriptions.items()
        }
