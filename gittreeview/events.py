"""Publish/subscribe primitives.

Events are delivered to every handler subscribed at the time ``fire`` is
called, one handler at a time, in subscription order. A handler returning an
awaitable is awaited before the next handler runs. Late subscribers never see
events fired before they subscribed.
"""

import inspect
import logging
from enum import Enum
from typing import Any, Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RefreshReason(Enum):
    """Why an explorer is asking its host to re-query the tree."""
    ACTIVE_EDITOR_CHANGED = 'active-editor-changed'
    AUTO_REFRESH_CHANGED = 'auto-refresh-changed'
    COMMAND = 'command'
    CONFIGURATION_CHANGED = 'configuration'
    NODE_COMMAND = 'node-command'
    REPO_CHANGED = 'repo-changed'
    VIEW_CHANGED = 'view-changed'
    VISIBLE_EDITORS_CHANGED = 'visible-editors-changed'


class Subscription:
    """Handle returned by ``EventEmitter.subscribe``.

    Disposing is idempotent.
    """

    def __init__(self, emitter: 'EventEmitter', handler: Callable[[Any], Any]):
        self._emitter = emitter
        self._handler = handler

    @property
    def active(self) -> bool:
        return self._emitter is not None

    def dispose(self) -> None:
        if self._emitter is None:
            return
        self._emitter._remove(self)
        self._emitter = None


class EventEmitter(Generic[T]):
    """A single event stream with sequential, at-least-once delivery."""

    def __init__(self, name: str = None):
        self.name = name or self.__class__.__name__
        self._subscriptions: List[Subscription] = []
        self.fire_count = 0

    def subscribe(self, handler: Callable[[T], Any]) -> Subscription:
        subscription = Subscription(self, handler)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Optional[Subscription]) -> None:
        if subscription is not None:
            subscription.dispose()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    async def fire(self, event: T = None) -> None:
        """Deliver ``event`` to the current subscribers.

        A failing handler is logged and does not prevent delivery to the
        handlers after it.
        """
        self.fire_count += 1
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            try:
                result = subscription._handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.warning(f"{self.name}: handler {subscription._handler!r} failed", exc_info=True)

    def clear(self) -> None:
        """Drop every subscription."""
        for subscription in list(self._subscriptions):
            subscription.dispose()

    def _remove(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            pass
