"""Live query subscriptions.

A subscription registers interest in a set of tables. After every committed
write touching one of those tables the query is re-run and its result handed
to the callback.
"""

import logging
from typing import Any, Callable, Iterable

from kakeibo.domain.entities import Table

logger = logging.getLogger(__name__)


class Subscription:
    """Handle for a registered live query."""

    def __init__(
        self,
        registry: "ObserverRegistry",
        tables: frozenset[Table],
        query: Callable[[], Any],
        callback: Callable[[Any], None],
    ):
        self._registry = registry
        self.tables = tables
        self.query = query
        self.callback = callback
        self.active = True

    def refresh(self) -> None:
        """Re-run the query and deliver the result."""
        if not self.active:
            return
        # The triggering write is already committed; callback errors are only logged
        try:
            self.callback(self.query())
        except Exception:
            logger.exception("Live query failed for tables %s", sorted(t.value for t in self.tables))

    def unsubscribe(self) -> None:
        """Stop receiving results."""
        self.active = False
        self._registry.remove(self)


class ObserverRegistry:
    """Registered subscriptions, notified per committed table set."""

    def __init__(self):
        self._subscriptions: list[Subscription] = []

    def add(
        self,
        tables: Iterable[Table],
        query: Callable[[], Any],
        callback: Callable[[Any], None],
    ) -> Subscription:
        subscription = Subscription(self, frozenset(Table(t) for t in tables), query, callback)
        self._subscriptions.append(subscription)
        return subscription

    def remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def notify(self, touched: set[Table]) -> None:
        """Refresh every subscription whose tables intersect ``touched``."""
        if not touched:
            return
        # Copy: callbacks may subscribe or unsubscribe
        for subscription in list(self._subscriptions):
            if subscription.tables & touched:
                subscription.refresh()

    def __len__(self) -> int:
        return len(self._subscriptions)
