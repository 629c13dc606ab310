"""
Refresh cycles for the full metrics view and the lightweight summary.
"""

import asyncio
import logging
from typing import Tuple

from ...ledger.base import LedgerReader, calculate_window_start
from ...ledger.reserves import ReservesReader
from ...metrics.aggregator import PRICE_HISTORY_POINTS, aggregate, summarize
from ...models import EventWindow, PublishedSnapshot, Reserves
from ...pricing.amm import FEE_BPS
from ...pricing.quoter import TokenPair
from .base import RefreshCycle

logger = logging.getLogger(__name__)


class _WindowCycle(RefreshCycle):
    """Fetches reserves and the rolling event window at the same head block."""

    def __init__(
        self,
        ledger: LedgerReader,
        reserves_reader: ReservesReader,
        pool: str,
        pair: TokenPair,
        window_blocks: int,
    ):
        self.ledger = ledger
        self.reserves_reader = reserves_reader
        self.pool = pool
        self.pair = pair
        self.window_blocks = window_blocks

    async def fetch(self) -> Tuple[EventWindow, Reserves]:
        current_block = await self.ledger.get_current_block()
        from_block = calculate_window_start(current_block, self.window_blocks)
        window, reserves = await asyncio.gather(
            self.ledger.fetch_window(self.pool, from_block, current_block),
            self.reserves_reader.get_reserves(current_block),
        )
        return window, reserves


class MetricsCycle(_WindowCycle):
    """Full PoolMetrics, refreshed every 30 seconds by default."""

    name = "metrics"

    def __init__(self, *args, fee_bps: int = FEE_BPS, price_history_points: int = PRICE_HISTORY_POINTS, **kwargs):
        super().__init__(*args, **kwargs)
        self.fee_bps = fee_bps
        self.price_history_points = price_history_points

    def build(self, fetched: Tuple[EventWindow, Reserves]) -> PublishedSnapshot:
        window, reserves = fetched
        metrics = aggregate(
            window,
            reserves,
            self.pair,
            fee_bps=self.fee_bps,
            price_history_points=self.price_history_points,
        )
        return PublishedSnapshot(metrics=metrics, reserves=reserves)


class SummaryCycle(_WindowCycle):
    """PoolSummary, refreshed every 60 seconds by default."""

    name = "summary"

    def build(self, fetched: Tuple[EventWindow, Reserves]) -> PublishedSnapshot:
        window, reserves = fetched
        return PublishedSnapshot(metrics=summarize(window, reserves, self.pair), reserves=reserves)
