"""
Reads current pool state with eth_call.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from eth_abi import encode
from web3 import AsyncWeb3, Web3

from ..models import Reserves, UserLiquidity
from .decoding import (
    GET_RESERVES_SIGNATURE,
    GET_USER_LIQUIDITY_SIGNATURE,
    decode_reserves,
    decode_user_liquidity,
    function_selector,
)
from .errors import ErrorHandler, call_with_retry

logger = logging.getLogger(__name__)


class ReservesReader:
    """
    Reads reserves and LP positions from the pool contract.

    getReserves() returns (reserveA, reserveB, totalLiquidity);
    getUserLiquidity(address) returns (liquidity, shareBasisPoints).
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        pool_address: str,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        error_handler: Optional[ErrorHandler] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.w3 = w3
        self.pool_address = Web3.to_checksum_address(pool_address)
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.error_handler = error_handler or ErrorHandler(logger)
        self._sleep = sleep

    async def _eth_call(self, description: str, data: bytes, block_identifier="latest") -> bytes:
        tx = {"to": self.pool_address, "data": Web3.to_hex(data)}
        return await call_with_retry(
            lambda: self.w3.eth.call(tx, block_identifier=block_identifier),
            description,
            error_handler=self.error_handler,
            max_retries=self.max_retries,
            base_delay=self.retry_delay,
            sleep=self._sleep,
        )

    async def get_reserves(self, block_number: Optional[int] = None) -> Reserves:
        """
        Current reserves of the pool.

        Args:
            block_number: Block to read at, the chain head when omitted

        Raises:
            LedgerUnavailableError: If the call keeps failing
            EventDecodeError: If the response is malformed
        """
        block_identifier = block_number if block_number is not None else "latest"
        raw = await self._eth_call(
            "getReserves", bytes(function_selector(GET_RESERVES_SIGNATURE)), block_identifier
        )
        reserves = decode_reserves(raw, block_number=block_number)
        logger.debug(
            f"Reserves at {block_identifier}: {reserves.reserve_a} / {reserves.reserve_b} "
            f"(total liquidity {reserves.total_liquidity})"
        )
        return reserves

    async def get_user_liquidity(self, user: str) -> UserLiquidity:
        """LP tokens held by user and their share of the pool."""
        data = bytes(function_selector(GET_USER_LIQUIDITY_SIGNATURE)) + encode(
            ["address"], [Web3.to_checksum_address(user)]
        )
        raw = await self._eth_call("getUserLiquidity", data)
        return decode_user_liquidity(raw)
