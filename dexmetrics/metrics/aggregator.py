"""
Pool metrics aggregation.

Pure functions from (event window, reserves) to PoolMetrics. All
arithmetic runs in a 78-digit Decimal context; values are rounded only
by format_metrics() at the display boundary.
"""

import logging
from decimal import Decimal, localcontext
from typing import Dict, List, Optional

from ..models import EventWindow, PoolMetrics, PoolSummary, PricePoint, Reserves, SwapEvent
from ..pricing.amm import BPS_DENOMINATOR, FEE_BPS
from ..pricing.fixed_point import DECIMAL_PRECISION, format_fixed, to_decimal
from ..pricing.quoter import TokenPair

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365
PRICE_HISTORY_POINTS = 24
ZERO = Decimal(0)


def _swap_volume_a(swap: SwapEvent, pair: TokenPair) -> Decimal:
    """
    Trade size in token A units.

    Token B inputs are valued at the swap's own execution rate, which is
    exactly its token A leg.
    """
    if pair.is_token_a(swap.token_in):
        return to_decimal(swap.amount_in, pair.decimals_a)
    return to_decimal(swap.amount_out, pair.decimals_a)


def execution_price(swap: SwapEvent, pair: TokenPair) -> Decimal:
    """Token B per token A realised by a swap, 0 for a degenerate swap."""
    if pair.is_token_a(swap.token_in):
        amount_a = to_decimal(swap.amount_in, pair.decimals_a)
        amount_b = to_decimal(swap.amount_out, pair.decimals_b)
    else:
        amount_a = to_decimal(swap.amount_out, pair.decimals_a)
        amount_b = to_decimal(swap.amount_in, pair.decimals_b)
    if amount_a == 0:
        return ZERO
    return amount_b / amount_a


def current_price(reserves: Reserves, pair: TokenPair) -> Decimal:
    """Reserve ratio B/A in display units, 0 when either side is empty."""
    reserve_a = to_decimal(reserves.reserve_a, pair.decimals_a)
    reserve_b = to_decimal(reserves.reserve_b, pair.decimals_b)
    if reserve_a == 0 or reserve_b == 0:
        return ZERO
    return reserve_b / reserve_a


def total_value_locked(reserves: Reserves, pair: TokenPair) -> Decimal:
    """Sum of both reserves in token units (no price conversion)."""
    return to_decimal(reserves.reserve_a, pair.decimals_a) + to_decimal(reserves.reserve_b, pair.decimals_b)


def price_history(window: EventWindow, pair: TokenPair, points: int = PRICE_HISTORY_POINTS) -> List[PricePoint]:
    """Execution prices of the most recent swaps, oldest first."""
    if points <= 0:
        return []
    recent = window.swaps[-points:]
    return [PricePoint(timestamp=swap.timestamp, price=execution_price(swap, pair)) for swap in recent]


def aggregate(
    window: EventWindow,
    reserves: Reserves,
    pair: TokenPair,
    fee_bps: int = FEE_BPS,
    price_history_points: int = PRICE_HISTORY_POINTS,
) -> PoolMetrics:
    """
    Compute pool metrics for a window of events.

    Args:
        window: Swap and liquidity events of the rolling window
        reserves: Reserves read for the same cycle
        pair: Token addresses and decimals
        fee_bps: Pool fee in basis points
        price_history_points: Number of recent swap prices to keep

    Returns:
        PoolMetrics with full-precision Decimal fields
    """
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION

        volume = sum((_swap_volume_a(swap, pair) for swap in window.swaps), ZERO)
        fees = volume * Decimal(fee_bps) / Decimal(BPS_DENOMINATOR)
        users = {swap.user.lower() for swap in window.swaps}

        tvl = total_value_locked(reserves, pair)
        apr = fees * DAYS_PER_YEAR / tvl * 100 if tvl > 0 else ZERO
        price_now = current_price(reserves, pair)

        price_change = ZERO
        if window.swaps:
            start_price = execution_price(window.swaps[0], pair)
            if start_price > 0:
                price_change = (price_now - start_price) / start_price * 100

        history = price_history(window, pair, price_history_points)

    metrics = PoolMetrics(
        tvl=tvl,
        volume_24h=volume,
        fees_24h=fees,
        total_transactions=len(window.swaps) + len(window.liquidity_events),
        unique_users=len(users),
        price_change_24h=price_change,
        apr=apr,
        current_price=price_now,
        price_history=tuple(history),
        from_block=window.from_block,
        to_block=window.to_block,
    )
    logger.debug(
        f"Aggregated blocks {window.from_block}-{window.to_block}: "
        f"{metrics.total_transactions} txs, volume {volume}"
    )
    return metrics


def summarize(window: EventWindow, reserves: Reserves, pair: TokenPair) -> PoolSummary:
    """TVL, 24h volume and current price without the full metric set."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        volume = sum((_swap_volume_a(swap, pair) for swap in window.swaps), ZERO)
        return PoolSummary(
            tvl=total_value_locked(reserves, pair),
            volume_24h=volume,
            current_price=current_price(reserves, pair),
        )


def format_metrics(metrics: PoolMetrics, pair: Optional[TokenPair] = None) -> Dict[str, object]:
    """
    Display form of PoolMetrics.

    tvl, volume, apr and price change use 2 places; fees and price use 4.
    """
    formatted = {
        "tvl": format_fixed(metrics.tvl, 2),
        "volume_24h": format_fixed(metrics.volume_24h, 2),
        "fees_24h": format_fixed(metrics.fees_24h, 4),
        "total_transactions": metrics.total_transactions,
        "unique_users": metrics.unique_users,
        "price_change_24h": format_fixed(metrics.price_change_24h, 2),
        "apr": format_fixed(metrics.apr, 2),
        "current_price": format_fixed(metrics.current_price, 4),
        "price_history": [
            {"timestamp": point.timestamp, "price": format_fixed(point.price, 4)}
            for point in metrics.price_history
        ],
        "from_block": metrics.from_block,
        "to_block": metrics.to_block,
    }
    if pair is not None:
        formatted["symbol_a"] = pair.symbol_a
        formatted["symbol_b"] = pair.symbol_b
    return formatted


def format_summary(summary: PoolSummary) -> Dict[str, str]:
    return {
        "tvl": format_fixed(summary.tvl, 2),
        "volume_24h": format_fixed(summary.volume_24h, 2),
        "current_price": format_fixed(summary.current_price, 4),
    }
