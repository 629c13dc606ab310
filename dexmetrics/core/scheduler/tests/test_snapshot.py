"""Tests for SnapshotStore."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from dexmetrics.core.scheduler.base import CycleResult, SnapshotListener
from dexmetrics.core.scheduler.snapshot import SnapshotStore


class RecordingListener(SnapshotListener):
    def __init__(self):
        self.published = []
        self.failed = []

    async def on_snapshot_published(self, snapshot, result):
        self.published.append(snapshot)

    async def on_refresh_failed(self, result):
        self.failed.append(result)


class TestSnapshotStore:
    def test_empty_store(self):
        store = SnapshotStore()

        assert store.latest() is None
        assert store.latest_reserves() is None

    @pytest.mark.asyncio
    async def test_publish_replaces_snapshot(self, snapshot_factory):
        store = SnapshotStore()
        first, second = snapshot_factory(1), snapshot_factory(2)

        await store.publish(first)
        await store.publish(second)

        assert store.latest() is second
        assert store.latest_reserves() is second.reserves
        assert store.publish_count == 2

    @pytest.mark.asyncio
    async def test_listener_and_callbacks_notified(self, snapshot_factory):
        store = SnapshotStore()
        listener = RecordingListener()
        sync_callback = MagicMock()
        async_callback = AsyncMock()
        store.subscribe(listener)
        store.subscribe(sync_callback)
        store.subscribe(async_callback)

        snapshot = snapshot_factory()
        await store.publish(snapshot)

        assert listener.published == [snapshot]
        sync_callback.assert_called_once_with(snapshot)
        async_callback.assert_awaited_once_with(snapshot)

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_block_others(self, snapshot_factory):
        store = SnapshotStore()
        store.subscribe(MagicMock(side_effect=RuntimeError("boom")))
        listener = RecordingListener()
        store.subscribe(listener)

        snapshot = snapshot_factory()
        await store.publish(snapshot)

        assert store.latest() is snapshot
        assert listener.published == [snapshot]

    @pytest.mark.asyncio
    async def test_unsubscribe_by_callback(self, snapshot_factory):
        store = SnapshotStore()
        callback = MagicMock()
        store.subscribe(callback)

        assert store.unsubscribe(callback) is True
        assert store.unsubscribe(callback) is False

        await store.publish(snapshot_factory())
        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_notify_failure(self):
        store = SnapshotStore()
        listener = RecordingListener()
        store.subscribe(listener)
        result = CycleResult(cycle_id=1, name="metrics")
        result.mark_failed(RuntimeError("rpc down"))

        await store.notify_failure(result)

        assert listener.failed == [result]
        assert result.error == "RuntimeError: rpc down"

    def test_subscribe_rejects_non_callable(self):
        with pytest.raises(TypeError):
            SnapshotStore().subscribe(42)
