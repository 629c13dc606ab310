"""Tests for RefreshScheduler."""
import asyncio

import pytest

from dexmetrics.core.scheduler.base import CycleStatus, RefreshState, SnapshotListener
from dexmetrics.core.scheduler.scheduler import RefreshScheduler
from dexmetrics.errors import LedgerUnavailableError


class FailureListener(SnapshotListener):
    def __init__(self):
        self.failures = []

    async def on_snapshot_published(self, snapshot, result):
        pass

    async def on_refresh_failed(self, result):
        self.failures.append(result)


class TestRefreshScheduler:
    def test_invalid_interval(self, cycle):
        with pytest.raises(ValueError):
            RefreshScheduler(cycle, interval=0)

    @pytest.mark.asyncio
    async def test_refresh_publishes_snapshot(self, cycle):
        scheduler = RefreshScheduler(cycle, interval=30)

        result = await scheduler.refresh_once()

        assert result.status is CycleStatus.COMPLETED
        assert scheduler.store.latest() is result.snapshot
        assert scheduler.state is RefreshState.IDLE
        assert scheduler.last_result is result

    @pytest.mark.asyncio
    async def test_state_transitions(self, cycle):
        scheduler = RefreshScheduler(cycle, interval=30)
        cycle.scheduler = scheduler
        published_states = []
        scheduler.store.subscribe(lambda snapshot: published_states.append(scheduler.state))

        await scheduler.refresh_once()

        assert cycle.states_seen == [RefreshState.FETCHING, RefreshState.AGGREGATING]
        assert published_states == [RefreshState.PUBLISHED]
        assert scheduler.state is RefreshState.IDLE

    @pytest.mark.asyncio
    async def test_overlapping_triggers_run_one_fetch(self, cycle):
        scheduler = RefreshScheduler(cycle, interval=30)
        cycle.gate.clear()

        assert scheduler.trigger() is True
        await asyncio.sleep(0)
        assert scheduler.state is RefreshState.FETCHING

        assert scheduler.trigger() is False
        assert scheduler.notify_transaction_confirmed("0xabc") is False
        skipped = await scheduler.refresh_once()
        assert skipped.status is CycleStatus.SKIPPED

        cycle.gate.set()
        await scheduler._inflight

        assert cycle.fetch_calls == 1
        assert scheduler.store.publish_count == 1

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_snapshot(self, cycle):
        scheduler = RefreshScheduler(cycle, interval=30)
        listener = FailureListener()
        scheduler.store.subscribe(listener)

        first = await scheduler.refresh_once()
        cycle.fail_with = LedgerUnavailableError("rpc down")
        failed = await scheduler.refresh_once()

        assert failed.status is CycleStatus.FAILED
        assert "rpc down" in failed.error
        assert scheduler.store.latest() is first.snapshot
        assert listener.failures == [failed]
        assert scheduler.state is RefreshState.IDLE

    @pytest.mark.asyncio
    async def test_stop_cancels_without_publishing(self, cycle):
        scheduler = RefreshScheduler(cycle, interval=30)
        cycle.gate.clear()

        scheduler.start()
        await asyncio.sleep(0)
        assert scheduler.is_running
        assert scheduler.state is RefreshState.FETCHING

        await scheduler.stop()

        assert scheduler.store.latest() is None
        assert scheduler.last_result.status is CycleStatus.CANCELLED
        assert scheduler.state is RefreshState.IDLE
        assert not scheduler.is_running

    @pytest.mark.asyncio
    async def test_loop_refreshes_periodically(self, cycle):
        scheduler = RefreshScheduler(cycle, interval=0.01)

        scheduler.start()
        await asyncio.sleep(0.05)
        await scheduler.stop()

        assert cycle.fetch_calls >= 2
        assert scheduler.store.latest() is not None

    @pytest.mark.asyncio
    async def test_start_twice_keeps_single_loop(self, cycle):
        scheduler = RefreshScheduler(cycle, interval=30)

        scheduler.start()
        task = scheduler._loop_task
        scheduler.start()

        assert scheduler._loop_task is task
        await scheduler.stop()
