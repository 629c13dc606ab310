"""
Periodic and on-demand refresh of a published snapshot.
"""

import asyncio
import logging
from typing import Optional

from .base import CycleResult, RefreshCycle, RefreshState
from .snapshot import SnapshotStore

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Runs a RefreshCycle every interval seconds and on trigger().

    At most one cycle is in flight: ticks and triggers that arrive while
    FETCHING or AGGREGATING are dropped, not queued. A failed or cancelled
    cycle returns to IDLE and leaves the previous snapshot in place.
    """

    def __init__(self, cycle: RefreshCycle, interval: float, store: Optional[SnapshotStore] = None):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.cycle = cycle
        self.interval = interval
        self.store = store or SnapshotStore(cycle.name)
        self.name = cycle.name
        self._state = RefreshState.IDLE
        self._cycle_count = 0
        self._loop_task: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None
        self.last_result: Optional[CycleResult] = None

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state in (RefreshState.FETCHING, RefreshState.AGGREGATING)

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def _set_state(self, state: RefreshState) -> None:
        if state is not self._state:
            logger.debug(f"[{self.name}] {self._state.value} -> {state.value}")
        self._state = state

    async def refresh_once(self) -> CycleResult:
        """
        Run one cycle now unless one is already in flight.

        Returns:
            CycleResult; SKIPPED when another cycle was running
        """
        if self.is_busy:
            result = CycleResult(cycle_id=self._cycle_count, name=self.name)
            result.mark_skipped()
            logger.debug(f"[{self.name}] refresh skipped, cycle {self._cycle_count} in flight")
            return result

        self._cycle_count += 1
        result = CycleResult(cycle_id=self._cycle_count, name=self.name)
        self._set_state(RefreshState.FETCHING)
        try:
            fetched = await self.cycle.fetch()
            self._set_state(RefreshState.AGGREGATING)
            snapshot = self.cycle.build(fetched)
            self._set_state(RefreshState.PUBLISHED)
            result.mark_completed(snapshot)
            await self.store.publish(snapshot, result)
        except asyncio.CancelledError:
            result.mark_cancelled()
            logger.info(f"[{self.name}] cycle {result.cycle_id} cancelled")
            raise
        except Exception as e:
            result.mark_failed(e)
            logger.error(f"[{self.name}] cycle {result.cycle_id} failed: {result.error}")
            await self.store.notify_failure(result)
        finally:
            self._set_state(RefreshState.IDLE)
            self.last_result = result

        return result

    def trigger(self) -> bool:
        """
        Start a cycle in the background.

        Returns:
            False if a cycle is already in flight
        """
        if self.is_busy or (self._inflight is not None and not self._inflight.done()):
            logger.debug(f"[{self.name}] trigger ignored, refresh already in flight")
            return False
        self._inflight = asyncio.create_task(self.refresh_once())
        return True

    def notify_transaction_confirmed(self, tx_hash: Optional[str] = None) -> bool:
        """Refresh after the user's own transaction lands."""
        logger.info(f"[{self.name}] transaction confirmed {tx_hash or ''}, refreshing")
        return self.trigger()

    async def _run_loop(self) -> None:
        while True:
            await self.refresh_once()
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        """Start periodic refresh; the first cycle runs immediately."""
        if self.is_running:
            logger.warning(f"[{self.name}] scheduler already running")
            return
        logger.info(f"[{self.name}] starting refresh every {self.interval}s")
        self._loop_task = asyncio.create_task(self._run_loop())

    async def stop(self) -> None:
        """Stop the loop and cancel any in-flight cycle."""
        tasks = [t for t in (self._loop_task, self._inflight) if t is not None and not t.done()]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._loop_task = None
        self._inflight = None
        self._set_state(RefreshState.IDLE)
        logger.info(f"[{self.name}] scheduler stopped")
