"""Shared fixtures for scheduler tests."""
import asyncio
from decimal import Decimal

import pytest

from dexmetrics.core.scheduler.base import RefreshCycle
from dexmetrics.models import PoolSummary, PublishedSnapshot, Reserves


def make_snapshot(tvl: int = 1) -> PublishedSnapshot:
    return PublishedSnapshot(
        metrics=PoolSummary(tvl=Decimal(tvl), volume_24h=Decimal(0), current_price=Decimal(1)),
        reserves=Reserves(reserve_a=tvl, reserve_b=tvl, total_liquidity=tvl),
    )


class FakeCycle(RefreshCycle):
    """Cycle whose fetch can be held open and made to fail."""

    name = "fake"

    def __init__(self):
        self.gate = asyncio.Event()
        self.gate.set()
        self.fetch_calls = 0
        self.fail_with = None
        self.states_seen = []
        self.scheduler = None

    async def fetch(self):
        self.fetch_calls += 1
        if self.scheduler is not None:
            self.states_seen.append(self.scheduler.state)
        await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return self.fetch_calls

    def build(self, fetched):
        if self.scheduler is not None:
            self.states_seen.append(self.scheduler.state)
        return make_snapshot(fetched)


@pytest.fixture
def cycle():
    return FakeCycle()


@pytest.fixture
def snapshot_factory():
    return make_snapshot
