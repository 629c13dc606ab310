"""
Holder of the most recently published snapshot.
"""

import inspect
import logging
from typing import Awaitable, Callable, List, Optional, Union

from ...models import PublishedSnapshot
from .base import CycleResult, SnapshotListener

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[PublishedSnapshot], Union[None, Awaitable[None]]]


class _CallbackListener(SnapshotListener):
    """Adapts a plain callable to SnapshotListener."""

    def __init__(self, callback: SnapshotCallback):
        self.callback = callback

    async def on_snapshot_published(self, snapshot, result):
        outcome = self.callback(snapshot)
        if inspect.isawaitable(outcome):
            await outcome


class SnapshotStore:
    """
    Single-slot store for the published snapshot.

    publish() replaces the snapshot by one reference assignment before
    notifying anyone, so readers see either the old or the new snapshot
    and never a mix of the two.
    """

    def __init__(self, name: str = "metrics"):
        self.name = name
        self._snapshot: Optional[PublishedSnapshot] = None
        self._listeners: List[SnapshotListener] = []
        self.publish_count = 0

    def latest(self) -> Optional[PublishedSnapshot]:
        """Last published snapshot, None before the first completed cycle."""
        return self._snapshot

    def latest_reserves(self):
        snapshot = self._snapshot
        return snapshot.reserves if snapshot is not None else None

    def subscribe(self, listener: Union[SnapshotListener, SnapshotCallback]) -> SnapshotListener:
        """
        Register a listener or a callback taking the snapshot.

        Returns the registered listener, to be passed to unsubscribe().
        """
        if not isinstance(listener, SnapshotListener):
            if not callable(listener):
                raise TypeError(f"Listener must be a SnapshotListener or callable, got {type(listener).__name__}")
            listener = _CallbackListener(listener)
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: SnapshotListener) -> bool:
        for registered in list(self._listeners):
            if registered is listener or getattr(registered, "callback", None) is listener:
                self._listeners.remove(registered)
                return True
        return False

    async def publish(self, snapshot: PublishedSnapshot, result: Optional[CycleResult] = None) -> None:
        self._snapshot = snapshot
        self.publish_count += 1
        logger.info(f"Published {self.name} snapshot #{self.publish_count}")

        for listener in list(self._listeners):
            try:
                await listener.on_snapshot_published(snapshot, result)
            except Exception as e:
                logger.error(f"Snapshot listener {type(listener).__name__} failed: {e}")

    async def notify_failure(self, result: CycleResult) -> None:
        for listener in list(self._listeners):
            try:
                await listener.on_refresh_failed(result)
            except Exception as e:
                logger.error(f"Snapshot listener {type(listener).__name__} failed: {e}")
