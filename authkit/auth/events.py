"""
authkit - Event Channels

Two broadcast primitives with different replay semantics:

- LifecycleNotifier: hot multicast of account lifecycle events. Late
  subscribers never see earlier events.
- IdentityStream: replay-last-value channel for the interactive session.
  A new subscriber immediately receives the current state.

Observers are plain callables. Delivery is synchronous, from a snapshot of
the subscriber list, so subscribing or unsubscribing while a publish is in
flight is safe. A subscription cancelled mid-publish receives nothing more.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, TypeVar

from .core import (
    AccountCreated,
    AccountDeleted,
    LifecycleEvent,
    SessionState,
)

logger = logging.getLogger("authkit.auth.events")

T = TypeVar("T")


class Subscription:
    """Handle returned by ``subscribe``; also usable as a context manager."""

    def __init__(self, observer: Callable, on_cancel: Callable[[Subscription], None]):
        self.observer = observer
        self._on_cancel = on_cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._active = False
            self._on_cancel(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc) -> None:
        self.unsubscribe()


def _deliver(subscription: Subscription, value, channel: str) -> None:
    if not subscription.active:
        return
    try:
        subscription.observer(value)
    except Exception:
        logger.exception("%s observer %r raised; continuing delivery", channel, subscription.observer)


# ============================================================================
# Lifecycle Notifier (no replay)
# ============================================================================


class LifecycleNotifier:
    """
    Fan-out channel for ``AccountCreated`` / ``AccountDeleted``.

    Observer failures are logged and isolated: they never reach the
    publisher and never stop delivery to other observers.
    """

    def __init__(self):
        self._subscriptions: list[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self, observer: Callable[[LifecycleEvent], None]) -> Subscription:
        """Receive every future lifecycle event."""
        subscription = Subscription(observer, self._remove)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def on_created(self, observer: Callable[[AccountCreated], None]) -> Subscription:
        """Receive future ``AccountCreated`` events only."""
        return self.subscribe(_only(AccountCreated, observer))

    def on_deleted(self, observer: Callable[[AccountDeleted], None]) -> Subscription:
        """Receive future ``AccountDeleted`` events only."""
        return self.subscribe(_only(AccountDeleted, observer))

    def publish(self, event: LifecycleEvent) -> None:
        with self._lock:
            snapshot = list(self._subscriptions)
        logger.info("Lifecycle event %s for account %s", event.kind.value, event.account_id)
        for subscription in snapshot:
            _deliver(subscription, event, "Lifecycle")

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)


def _only(event_type: type, observer: Callable) -> Callable[[LifecycleEvent], None]:
    def filtered(event: LifecycleEvent) -> None:
        if isinstance(event, event_type):
            observer(event)

    return filtered


# ============================================================================
# Identity Stream (replays last value)
# ============================================================================


class IdentityStream(Generic[T]):
    """
    Append-only channel of session states that remembers the latest one.

    Subscribers get the current value at subscription time and every value
    published afterwards.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._subscriptions: list[Subscription] = []
        self._lock = threading.Lock()

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self, observer: Callable[[T], None]) -> Subscription:
        subscription = Subscription(observer, self._remove)
        with self._lock:
            self._subscriptions.append(subscription)
            current = self._value
        _deliver(subscription, current, "Identity stream")
        return subscription

    def publish(self, value: T) -> None:
        with self._lock:
            self._value = value
            snapshot = list(self._subscriptions)
        for subscription in snapshot:
            _deliver(subscription, value, "Identity stream")

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)


SessionStream = IdentityStream[SessionState]
