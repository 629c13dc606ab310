"""
Refresh scheduling and snapshot publication.
"""

from .base import CycleResult, CycleStatus, RefreshCycle, RefreshState, SnapshotListener
from .cycles import MetricsCycle, SummaryCycle
from .scheduler import RefreshScheduler
from .snapshot import SnapshotStore

__all__ = [
    "CycleResult",
    "CycleStatus",
    "RefreshCycle",
    "RefreshState",
    "SnapshotListener",
    "MetricsCycle",
    "SummaryCycle",
    "RefreshScheduler",
    "SnapshotStore",
]
