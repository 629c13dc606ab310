"""
Publishes refreshed pool snapshots to NATS.
"""

import logging
import time
from typing import Any, Dict, Optional

from ...config.nats_config import NatsConfig
from ...core.scheduler.base import CycleResult, SnapshotListener
from ...metrics.aggregator import format_metrics, format_summary
from ...models import PoolMetrics, PublishedSnapshot
from ...pricing.fixed_point import format_units
from ...pricing.quoter import TokenPair
from .client import NatsClient, NatsClientJS

logger = logging.getLogger(__name__)


class SnapshotPublisher(SnapshotListener):
    """
    Snapshot store listener forwarding each new snapshot to NATS.

    Full metrics go to <prefix>.metrics.<pool>, summaries to
    <prefix>.summary.<pool>, failed refreshes to <prefix>.status.<pool>.
    """

    def __init__(
        self,
        config: NatsConfig,
        pool_address: str,
        pair: Optional[TokenPair] = None,
        client: Optional[NatsClient] = None,
        use_jetstream: bool = False,
    ):
        self.config = config
        self.pool_address = pool_address
        self.pair = pair
        if client is None:
            client_cls = NatsClientJS if use_jetstream else NatsClient
            client = client_cls(config.get_nats_url(), config.connection_params)
        self.client = client
        self.use_jetstream = use_jetstream
        self.published = 0

    async def aconnect(self):
        await self.client.aconnect()
        if self.use_jetstream:
            await self.client.aregister_new_stream(self.config.STREAM_NAME, self.config.metrics_subjects)
        logger.info("SnapshotPublisher connected")

    async def aclose(self):
        await self.client.aclose()
        logger.info("SnapshotPublisher connection closed")

    async def __aenter__(self):
        await self.aconnect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def build_message(self, snapshot: PublishedSnapshot) -> Dict[str, Any]:
        if isinstance(snapshot.metrics, PoolMetrics):
            view = "metrics"
            payload = format_metrics(snapshot.metrics, self.pair)
        else:
            view = "summary"
            payload = format_summary(snapshot.metrics)

        reserves = snapshot.reserves
        message = {
            "pool": self.pool_address,
            "view": view,
            "published_at": snapshot.published_at,
            "block_number": reserves.block_number,
            "data": payload,
        }
        if self.pair is not None:
            message["reserves"] = {
                "reserve_a": format_units(reserves.reserve_a, self.pair.decimals_a),
                "reserve_b": format_units(reserves.reserve_b, self.pair.decimals_b),
                "total_liquidity": format_units(reserves.total_liquidity, 18),
            }
        return message

    async def on_snapshot_published(self, snapshot: PublishedSnapshot, result: Optional[CycleResult]) -> None:
        message = self.build_message(snapshot)
        subject = self.config.get_metrics_subject(self.pool_address, message["view"])
        await self.client.apublish(subject, message)
        self.published += 1
        logger.debug(f"Published {message['view']} snapshot to {subject}")

    async def on_refresh_failed(self, result: CycleResult) -> None:
        subject = self.config.get_metrics_subject(self.pool_address, "status")
        await self.client.apublish(
            subject,
            {
                "pool": self.pool_address,
                "view": result.name,
                "status": result.status.value if result.status else None,
                "error": result.error,
                "timestamp": time.time(),
            },
        )
