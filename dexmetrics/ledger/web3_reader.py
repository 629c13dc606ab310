"""
Ledger reader over web3's async client.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from web3 import AsyncWeb3, Web3

from .base import BlockIdentifier, LedgerReader
from .decoding import EVENT_SIGNATURES, Event, decode_log, dedupe_and_sort, event_topic
from .errors import ErrorHandler, call_with_retry

logger = logging.getLogger(__name__)

DEFAULT_MAX_BLOCK_RANGE = 10_000
DEFAULT_TIMESTAMP_CACHE_SIZE = 50_000


class Web3LedgerReader(LedgerReader):
    """
    Reads pool events with eth_getLogs.

    Large ranges are split into chunks of max_block_range blocks. Every RPC
    call goes through call_with_retry, so callers only ever see
    LedgerUnavailableError for transport failures.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        max_block_range: int = DEFAULT_MAX_BLOCK_RANGE,
        error_handler: Optional[ErrorHandler] = None,
        timestamp_cache_size: int = DEFAULT_TIMESTAMP_CACHE_SIZE,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        super().__init__()
        if max_block_range <= 0:
            raise ValueError(f"max_block_range must be positive, got {max_block_range}")
        self.w3 = w3
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.max_block_range = max_block_range
        self.error_handler = error_handler or ErrorHandler(self.logger)
        self.timestamp_cache_size = timestamp_cache_size
        self._timestamps: Dict[int, int] = {}
        self._sleep = sleep

    @classmethod
    def from_rpc_url(cls, rpc_url: str, request_timeout: float = 30.0, **kwargs) -> "Web3LedgerReader":
        """Build a reader with an HTTP provider."""
        provider = AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout})
        return cls(AsyncWeb3(provider), **kwargs)

    async def _call(self, description: str, operation: Callable[[], Awaitable[Any]]) -> Any:
        return await call_with_retry(
            operation,
            description,
            error_handler=self.error_handler,
            max_retries=self.max_retries,
            base_delay=self.retry_delay,
            sleep=self._sleep,
        )

    async def get_current_block(self) -> int:
        return int(await self._call("eth_blockNumber", lambda: self.w3.eth.block_number))

    async def get_block_timestamp(self, block_number: int) -> int:
        if block_number in self._timestamps:
            return self._timestamps[block_number]

        block = await self._call(
            f"eth_getBlockByNumber({block_number})",
            lambda: self.w3.eth.get_block(block_number),
        )
        timestamp = int(block["timestamp"])

        if len(self._timestamps) >= self.timestamp_cache_size:
            # Evict the oldest insertion
            self._timestamps.pop(next(iter(self._timestamps)))
        self._timestamps[block_number] = timestamp
        return timestamp

    async def _get_logs_chunk(self, pool: str, topic: str, from_block: int, to_block: int) -> List[Mapping]:
        params = {
            "address": Web3.to_checksum_address(pool),
            "fromBlock": from_block,
            "toBlock": to_block,
            "topics": [topic],
        }
        return list(
            await self._call(
                f"eth_getLogs({from_block}-{to_block})",
                lambda: self.w3.eth.get_logs(params),
            )
        )

    async def get_raw_logs(self, pool: str, event_name: str, from_block: int, to_block: int) -> List[Mapping]:
        """Raw logs for one event, deduplicated and in ledger order."""
        topic = Web3.to_hex(event_topic(EVENT_SIGNATURES[event_name]))
        logs: List[Mapping] = []
        chunk_start = from_block
        while chunk_start <= to_block:
            chunk_end = min(chunk_start + self.max_block_range - 1, to_block)
            logs.extend(await self._get_logs_chunk(pool, topic, chunk_start, chunk_end))
            chunk_start = chunk_end + 1
        return dedupe_and_sort(logs)

    async def get_events(
        self,
        pool: str,
        event_name: str,
        from_block: int,
        to_block: BlockIdentifier,
    ) -> List[Event]:
        if event_name not in EVENT_SIGNATURES:
            raise ValueError(f"Unknown event: {event_name}")
        if to_block == "latest":
            to_block = await self.get_current_block()

        logs = await self.get_raw_logs(pool, event_name, from_block, int(to_block))

        timestamps = {}
        for block_number in sorted({int(log["blockNumber"]) for log in logs}):
            timestamps[block_number] = await self.get_block_timestamp(block_number)

        events = [decode_log(log, event_name, timestamps[int(log["blockNumber"])]) for log in logs]
        self.logger.debug(f"Decoded {len(events)} {event_name} events in {from_block}-{to_block}")
        return events
