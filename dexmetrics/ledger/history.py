"""
Per-user transaction history built from an event window.
"""

from typing import List, Optional

from ..models import EventWindow, LiquidityEventKind, TransactionKind, UserTransaction
from .base import LedgerReader


def user_transactions(
    window: EventWindow,
    user: str,
    kind: Optional[TransactionKind] = None,
) -> List[UserTransaction]:
    """
    Events initiated by user, newest first.

    Args:
        window: Events to search
        user: Trader or liquidity provider address (case-insensitive)
        kind: Restrict to one transaction kind

    Returns:
        UserTransaction list ordered by (block_number, log_index) descending
    """
    wanted = user.lower()
    found = []

    if kind in (None, TransactionKind.SWAP):
        for swap in window.swaps:
            if swap.user.lower() != wanted:
                continue
            found.append(((swap.block_number, swap.log_index), UserTransaction(
                tx_hash=swap.tx_hash,
                kind=TransactionKind.SWAP,
                timestamp=swap.timestamp,
                block_number=swap.block_number,
                token_in=swap.token_in,
                amount_in=swap.amount_in,
                amount_out=swap.amount_out,
            )))

    for event in window.liquidity_events:
        event_kind = (
            TransactionKind.ADD_LIQUIDITY
            if event.kind is LiquidityEventKind.ADDED
            else TransactionKind.REMOVE_LIQUIDITY
        )
        if kind is not None and kind is not event_kind:
            continue
        if event.provider.lower() != wanted:
            continue
        found.append(((event.block_number, event.log_index), UserTransaction(
            tx_hash=event.tx_hash,
            kind=event_kind,
            timestamp=event.timestamp,
            block_number=event.block_number,
            amount_a=event.amount_a,
            amount_b=event.amount_b,
            liquidity_delta=event.liquidity_delta,
        )))

    found.sort(key=lambda item: item[0], reverse=True)
    return [tx for _, tx in found]


async def fetch_user_transactions(
    reader: LedgerReader,
    pool: str,
    user: str,
    history_blocks: int = 10_000,
    kind: Optional[TransactionKind] = None,
) -> List[UserTransaction]:
    """Read the last history_blocks blocks and return user's transactions."""
    window = await reader.fetch_recent(pool, history_blocks)
    return user_transactions(window, user, kind)
