"""
Decoding of pool event logs and contract call responses.

Logs come from eth_getLogs in web3's AttributeDict shape: indexed
parameters live in topics, the rest is ABI-encoded in data.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from eth_abi import decode
from hexbytes import HexBytes
from web3 import Web3

from ..errors import EventDecodeError
from ..models import LiquidityEvent, LiquidityEventKind, Reserves, SwapEvent, UserLiquidity

logger = logging.getLogger(__name__)

SWAP = "Swap"
LIQUIDITY_ADDED = "LiquidityAdded"
LIQUIDITY_REMOVED = "LiquidityRemoved"

# Swap(address indexed user, address indexed tokenIn, uint256 amountIn, uint256 amountOut)
# LiquidityAdded(address indexed provider, uint256 amountA, uint256 amountB, uint256 liquidityMinted)
# LiquidityRemoved(address indexed provider, uint256 amountA, uint256 amountB, uint256 liquidityBurned)
EVENT_SIGNATURES: Dict[str, str] = {
    SWAP: "Swap(address,address,uint256,uint256)",
    LIQUIDITY_ADDED: "LiquidityAdded(address,uint256,uint256,uint256)",
    LIQUIDITY_REMOVED: "LiquidityRemoved(address,uint256,uint256,uint256)",
}

GET_RESERVES_SIGNATURE = "getReserves()"
GET_USER_LIQUIDITY_SIGNATURE = "getUserLiquidity(address)"

Event = Union[SwapEvent, LiquidityEvent]


def event_topic(signature: str) -> HexBytes:
    """topic0 for an event signature."""
    return HexBytes(Web3.keccak(text=signature))


def function_selector(signature: str) -> HexBytes:
    """First four bytes of the keccak hash of a function signature."""
    return HexBytes(Web3.keccak(text=signature)[:4])


def _topic_to_address(topic: Any) -> str:
    raw = bytes(HexBytes(topic))
    if len(raw) != 32:
        raise EventDecodeError(f"Indexed address topic must be 32 bytes, got {len(raw)}")
    return Web3.to_checksum_address("0x" + raw[-20:].hex())


def _tx_hash(log: Mapping) -> str:
    tx_hash = log.get("transactionHash")
    return Web3.to_hex(HexBytes(tx_hash)) if tx_hash is not None else ""


def log_sort_key(log: Mapping) -> Tuple[int, int]:
    """Ledger order of a raw log."""
    return int(log["blockNumber"]), int(log["logIndex"])


def log_key(log: Mapping) -> Tuple[int, int, str]:
    """Identity of a raw log, used to drop duplicates across chunk boundaries."""
    return int(log["blockNumber"]), int(log["logIndex"]), _tx_hash(log)


def _check_topic(log: Mapping, event_name: str, expected_topics: int) -> List[HexBytes]:
    topics = [HexBytes(t) for t in log.get("topics", [])]
    if len(topics) != expected_topics:
        raise EventDecodeError(
            f"{event_name} log expected {expected_topics} topics, got {len(topics)}"
        )
    if topics[0] != event_topic(EVENT_SIGNATURES[event_name]):
        raise EventDecodeError(f"Log topic does not match {event_name}")
    return topics


def _decode_data(log: Mapping, types: List[str], event_name: str) -> Tuple:
    try:
        return decode(types, bytes(HexBytes(log["data"])))
    except Exception as e:
        raise EventDecodeError(f"Failed to decode {event_name} data: {e}") from e


def decode_swap(log: Mapping, timestamp: int = 0) -> SwapEvent:
    """Decode a Swap log."""
    topics = _check_topic(log, SWAP, 3)
    amount_in, amount_out = _decode_data(log, ["uint256", "uint256"], SWAP)
    return SwapEvent(
        user=_topic_to_address(topics[1]),
        token_in=_topic_to_address(topics[2]),
        amount_in=amount_in,
        amount_out=amount_out,
        block_number=int(log["blockNumber"]),
        timestamp=timestamp,
        tx_hash=_tx_hash(log),
        log_index=int(log["logIndex"]),
    )


def decode_liquidity(log: Mapping, kind: LiquidityEventKind, timestamp: int = 0) -> LiquidityEvent:
    """Decode a LiquidityAdded or LiquidityRemoved log."""
    event_name = LIQUIDITY_ADDED if kind is LiquidityEventKind.ADDED else LIQUIDITY_REMOVED
    topics = _check_topic(log, event_name, 2)
    amount_a, amount_b, liquidity = _decode_data(log, ["uint256", "uint256", "uint256"], event_name)
    return LiquidityEvent(
        provider=_topic_to_address(topics[1]),
        amount_a=amount_a,
        amount_b=amount_b,
        liquidity_delta=liquidity,
        kind=kind,
        block_number=int(log["blockNumber"]),
        timestamp=timestamp,
        tx_hash=_tx_hash(log),
        log_index=int(log["logIndex"]),
    )


def decode_log(log: Mapping, event_name: str, timestamp: int = 0) -> Event:
    """Dispatch on event name."""
    if event_name == SWAP:
        return decode_swap(log, timestamp)
    if event_name == LIQUIDITY_ADDED:
        return decode_liquidity(log, LiquidityEventKind.ADDED, timestamp)
    if event_name == LIQUIDITY_REMOVED:
        return decode_liquidity(log, LiquidityEventKind.REMOVED, timestamp)
    raise EventDecodeError(f"Unknown event: {event_name}")


def dedupe_and_sort(logs: Iterable[Mapping]) -> List[Mapping]:
    """Drop duplicate logs and order by (blockNumber, logIndex)."""
    unique = {}
    for log in logs:
        unique.setdefault(log_key(log), log)
    return sorted(unique.values(), key=log_sort_key)


def decode_reserves(raw_response: bytes, block_number: Optional[int] = None) -> Reserves:
    """Decode getReserves() -> (reserveA, reserveB, totalLiquidity)."""
    try:
        reserve_a, reserve_b, total_liquidity = decode(
            ["uint256", "uint256", "uint256"], bytes(HexBytes(raw_response))
        )
    except Exception as e:
        raise EventDecodeError(f"Failed to decode reserves response: {e}") from e
    return Reserves(
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        total_liquidity=total_liquidity,
        block_number=block_number,
    )


def decode_user_liquidity(raw_response: bytes) -> UserLiquidity:
    """Decode getUserLiquidity(address) -> (liquidity, shareBasisPoints)."""
    try:
        amount, share_bps = decode(["uint256", "uint256"], bytes(HexBytes(raw_response)))
    except Exception as e:
        raise EventDecodeError(f"Failed to decode user liquidity response: {e}") from e
    return UserLiquidity(amount=amount, share_bps=share_bps)
