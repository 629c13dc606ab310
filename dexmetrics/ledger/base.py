"""
Base classes for ledger readers.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Union

from ..models import EventWindow, LiquidityEvent, SwapEvent
from .decoding import LIQUIDITY_ADDED, LIQUIDITY_REMOVED, SWAP, Event

logger = logging.getLogger(__name__)

BlockIdentifier = Union[int, str]


def calculate_window_start(current_block: int, window_blocks: int) -> int:
    """First block of a rolling window ending at current_block, floored at 0."""
    if window_blocks < 0:
        raise ValueError(f"window_blocks must be non-negative, got {window_blocks}")
    return max(0, current_block - window_blocks)


def _ledger_order(event: Event):
    return event.block_number, event.log_index


class LedgerReader(ABC):
    """
    Abstract async reader of pool events.

    Subclasses provide raw access to events, block timestamps and the chain
    head. Window assembly is shared.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    async def get_events(
        self,
        pool: str,
        event_name: str,
        from_block: int,
        to_block: BlockIdentifier,
    ) -> List[Event]:
        """
        Decoded events of one kind, ordered by (block_number, log_index).

        Args:
            pool: Pool contract address
            event_name: Swap, LiquidityAdded or LiquidityRemoved
            from_block: First block, inclusive
            to_block: Last block, inclusive, or "latest"

        Raises:
            LedgerUnavailableError: If the ledger cannot be read
        """
        pass

    @abstractmethod
    async def get_block_timestamp(self, block_number: int) -> int:
        """Unix timestamp of a block."""
        pass

    @abstractmethod
    async def get_current_block(self) -> int:
        """Current chain head."""
        pass

    async def fetch_window(
        self,
        pool: str,
        from_block: int,
        to_block: BlockIdentifier = "latest",
    ) -> EventWindow:
        """
        All three event kinds for a block range.

        "latest" is resolved once so the three queries see the same range.
        """
        if to_block == "latest":
            to_block = await self.get_current_block()
        if from_block > to_block:
            return EventWindow.empty(from_block, to_block)

        swaps, added, removed = await asyncio.gather(
            self.get_events(pool, SWAP, from_block, to_block),
            self.get_events(pool, LIQUIDITY_ADDED, from_block, to_block),
            self.get_events(pool, LIQUIDITY_REMOVED, from_block, to_block),
        )

        liquidity_events: List[LiquidityEvent] = sorted([*added, *removed], key=_ledger_order)
        swap_events: List[SwapEvent] = sorted(swaps, key=_ledger_order)

        self.logger.debug(
            f"Fetched window {from_block}-{to_block}: "
            f"{len(swap_events)} swaps, {len(liquidity_events)} liquidity events"
        )
        return EventWindow(
            swaps=tuple(swap_events),
            liquidity_events=tuple(liquidity_events),
            from_block=from_block,
            to_block=to_block,
        )

    async def fetch_recent(self, pool: str, window_blocks: int) -> EventWindow:
        """Rolling window of window_blocks ending at the chain head."""
        current_block = await self.get_current_block()
        from_block = calculate_window_start(current_block, window_blocks)
        return await self.fetch_window(pool, from_block, current_block)
