"""
Base classes and types for the refresh scheduler.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from ...models import PublishedSnapshot

logger = logging.getLogger(__name__)


class RefreshState(Enum):
    """Lifecycle of one refresh cycle."""
    IDLE = "idle"
    FETCHING = "fetching"
    AGGREGATING = "aggregating"
    PUBLISHED = "published"


class CycleStatus(Enum):
    """Outcome of a refresh attempt."""
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CycleResult:
    """Result of one refresh attempt."""
    cycle_id: int
    name: str
    status: Optional[CycleStatus] = None
    start_time: datetime = field(default_factory=_utcnow)
    end_time: Optional[datetime] = None
    snapshot: Optional[PublishedSnapshot] = None
    error: Optional[str] = None
    exception: Optional[BaseException] = None

    @property
    def duration(self) -> Optional[timedelta]:
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return None

    @property
    def success(self) -> bool:
        return self.status == CycleStatus.COMPLETED

    def mark_completed(self, snapshot: PublishedSnapshot) -> None:
        self.status = CycleStatus.COMPLETED
        self.snapshot = snapshot
        self.end_time = _utcnow()

    def mark_failed(self, error: BaseException) -> None:
        self.status = CycleStatus.FAILED
        self.error = f"{type(error).__name__}: {error}"
        self.exception = error
        self.end_time = _utcnow()

    def mark_cancelled(self) -> None:
        self.status = CycleStatus.CANCELLED
        self.end_time = _utcnow()

    def mark_skipped(self) -> None:
        self.status = CycleStatus.SKIPPED
        self.end_time = _utcnow()


class RefreshCycle(ABC):
    """
    The work done by one refresh: an async fetch followed by a
    synchronous build of the snapshot to publish.
    """

    name: str = "refresh"

    @abstractmethod
    async def fetch(self) -> Any:
        """Read everything the snapshot needs from the ledger."""
        pass

    @abstractmethod
    def build(self, fetched: Any) -> PublishedSnapshot:
        """Turn fetched data into a snapshot. Must not perform I/O."""
        pass


class SnapshotListener(ABC):
    """
    Receives snapshot store notifications.

    Listener failures are logged and never affect the published snapshot.
    """

    @abstractmethod
    async def on_snapshot_published(self, snapshot: PublishedSnapshot, result: Optional[CycleResult]) -> None:
        """Called after a new snapshot replaced the previous one."""
        pass

    async def on_refresh_failed(self, result: CycleResult) -> None:
        """Called when a cycle failed; the previous snapshot stays published."""
        pass
