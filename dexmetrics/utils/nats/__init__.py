"""
NATS utilities for dexmetrics.

Provides a JSON NATS client (plain and JetStream) and a snapshot
publisher that forwards refreshed pool metrics.
"""

from .client import NatsClient, NatsClientJS, dumps, loads
from .snapshot_publisher import SnapshotPublisher

__all__ = ["NatsClient", "NatsClientJS", "SnapshotPublisher", "dumps", "loads"]
