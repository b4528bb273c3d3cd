"""
Subscription handles and latest-value combination of field streams.

Live operators in this package are callback based: they connect a slot to one
or more Qt signals and hand back a Subscription. Disposing the subscription
disconnects everything it owns.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from PySide6.QtCore import SignalInstance

from .field import FieldSnapshot

if TYPE_CHECKING:
    from .field_state import FieldState

logger = logging.getLogger(__name__)


class Subscription:
    """
    Disposable handle for live connections.

    A subscription owns signal connections, child subscriptions and plain
    dispose callbacks. Disposal runs in reverse order of registration and is
    idempotent. Can be used as a context manager.
    """

    def __init__(self) -> None:
        self._actions: list[Callable[[], None]] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def connect(self, signal: SignalInstance, slot: Callable[..., Any]) -> None:
        """
        Connect slot to signal and disconnect it again on dispose.

        The slot is wrapped so the same callable can be subscribed several
        times and each subscription only removes its own connection.
        """

        def forward(*args: Any) -> None:
            slot(*args)

        signal.connect(forward)

        def disconnect() -> None:
            try:
                signal.disconnect(forward)
            except (RuntimeError, TypeError):
                logger.debug("Signal already disconnected or its owner was deleted.")

        self.on_dispose(disconnect)

    def add(self, child: Subscription) -> None:
        """Dispose child together with this subscription."""
        self.on_dispose(child.dispose)

    def on_dispose(self, callback: Callable[[], None]) -> None:
        """Register a callback to run on dispose (immediately if already disposed)."""
        if self._disposed:
            callback()
            return
        self._actions.append(callback)

    def dispose(self) -> None:
        """Release everything this subscription owns."""
        if self._disposed:
            return
        self._disposed = True
        actions, self._actions = self._actions, []
        for action in reversed(actions):
            action()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


class _LatestCombiner:
    """Hold the latest snapshot per source and forward full rows."""

    def __init__(self, count: int, slot: Callable[[tuple[FieldSnapshot, ...]], None]):
        self._latest: list[FieldSnapshot | None] = [None] * count
        self._pending = set(range(count))
        self._slot = slot

    def update(self, index: int, snapshot: FieldSnapshot) -> None:
        self._latest[index] = snapshot
        if self._pending:
            self._pending.discard(index)
            if self._pending:
                return
        self._slot(tuple(s for s in self._latest if s is not None))


def combine_latest(
    fields: Sequence[FieldState],
    slot: Callable[[tuple[FieldSnapshot, ...]], None],
) -> Subscription:
    """
    Call slot with the latest snapshot of every field whenever any field changes.

    Each field replays its current snapshot on subscription, so slot fires
    once immediately with the current state of the whole pool, then once per
    change of any field, with the row in pool order. An empty pool fires once
    with an empty tuple.

    Args:
        fields: Fields to combine, in the order rows should be reported
        slot: Callable receiving a tuple of FieldSnapshot

    Returns:
        Subscription that detaches from every field on dispose
    """
    subscription = Subscription()

    if not fields:
        slot(())
        return subscription

    combiner = _LatestCombiner(len(fields), slot)
    try:
        for index, field_state in enumerate(fields):
            subscription.add(field_state.observe(lambda snapshot, i=index: combiner.update(i, snapshot)))
    except Exception:
        # slot raised on the initial row; the caller never gets the handle
        subscription.dispose()
        raise

    logger.debug(f"Combining latest values of {len(fields)} fields")
    return subscription
