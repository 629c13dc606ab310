"""
Constant-product AMM pricing model.

Pure functions over scaled integer reserves. The fee is deducted from the
input before applying the x * y = k invariant:

    amount_in_after_fee = amount_in * (10000 - fee_bps) / 10000
    amount_out = reserve_out - (reserve_in * reserve_out) / (reserve_in + amount_in_after_fee)

Evaluated in integers this becomes

    amount_out = (after_fee * reserve_out) // (reserve_in * 10000 + after_fee)

with after_fee = amount_in * (10000 - fee_bps), which rounds in the
pool's favour and never drains reserve_out.
"""

from decimal import Decimal, localcontext
from math import isqrt
from typing import Tuple

from ..errors import InsufficientLiquidityError, InvalidAmountError
from ..models import Reserves, SwapQuote
from .fixed_point import DECIMAL_PRECISION, to_decimal

FEE_BPS = 30
BPS_DENOMINATOR = 10_000


def _check_amount(name: str, value: int) -> None:
    if value < 0:
        raise InvalidAmountError(f"{name} must be non-negative, got {value}")


def _check_fee(fee_bps: int) -> None:
    if not 0 <= fee_bps < BPS_DENOMINATOR:
        raise InvalidAmountError(f"fee_bps must be in [0, {BPS_DENOMINATOR}), got {fee_bps}")


def get_amount_out(
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_bps: int = FEE_BPS,
) -> int:
    """
    Output amount for swapping amount_in against the given reserves.

    Args:
        reserve_in: Scaled reserve of the input token
        reserve_out: Scaled reserve of the output token
        amount_in: Scaled input amount
        fee_bps: Fee in basis points deducted from the input

    Returns:
        Scaled output amount, always strictly below reserve_out

    Raises:
        InsufficientLiquidityError: If either reserve is zero
        InvalidAmountError: If an amount is negative
    """
    _check_amount("amount_in", amount_in)
    _check_amount("reserve_in", reserve_in)
    _check_amount("reserve_out", reserve_out)
    _check_fee(fee_bps)

    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidityError("Pool has no liquidity to quote against")
    if amount_in == 0:
        return 0

    amount_in_after_fee = amount_in * (BPS_DENOMINATOR - fee_bps)
    numerator = amount_in_after_fee * reserve_out
    denominator = reserve_in * BPS_DENOMINATOR + amount_in_after_fee
    return numerator // denominator


def fee_amount(amount_in: int, fee_bps: int = FEE_BPS) -> int:
    """Portion of amount_in kept by the pool as a fee."""
    _check_amount("amount_in", amount_in)
    _check_fee(fee_bps)
    return amount_in * fee_bps // BPS_DENOMINATOR


def spot_price(
    reserve_in: int,
    reserve_out: int,
    decimals_in: int = 0,
    decimals_out: int = 0,
) -> Decimal:
    """Marginal price of the input token in output token units."""
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidityError("Pool has no liquidity to price against")
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return to_decimal(reserve_out, decimals_out) / to_decimal(reserve_in, decimals_in)


def price_impact(
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    amount_out: int,
) -> Decimal:
    """
    Price impact of a trade in percent.

    Compares the marginal price after the trade, taken from the simulated
    post-trade reserves, with the pre-trade spot price. Decimals cancel out
    because both prices are in the same units.
    """
    _check_amount("amount_in", amount_in)
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidityError("Pool has no liquidity to price against")
    if amount_in == 0:
        return Decimal(0)
    if amount_out >= reserve_out:
        raise InsufficientLiquidityError("Trade would drain the output reserve")

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        pre = Decimal(reserve_out) / Decimal(reserve_in)
        post = Decimal(reserve_out - amount_out) / Decimal(reserve_in + amount_in)
        return abs((pre - post) / pre) * 100


def exchange_rate(
    amount_in: int,
    amount_out: int,
    decimals_in: int,
    decimals_out: int,
) -> Decimal:
    """Realised output per unit of input in display units."""
    if amount_in == 0:
        return Decimal(0)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return to_decimal(amount_out, decimals_out) / to_decimal(amount_in, decimals_in)


def orient(reserves: Reserves, token_in_is_a: bool) -> Tuple[int, int]:
    """(reserve_in, reserve_out) for the given swap direction."""
    if token_in_is_a:
        return reserves.reserve_a, reserves.reserve_b
    return reserves.reserve_b, reserves.reserve_a


def remove_liquidity_amounts(liquidity_burned: int, reserves: Reserves) -> Tuple[int, int]:
    """
    Token amounts returned for burning LP tokens.

    amount = liquidity_burned * reserve / total_liquidity, per token.

    Raises:
        InsufficientLiquidityError: If the pool has no liquidity
        InvalidAmountError: If liquidity_burned is negative or exceeds supply
    """
    _check_amount("liquidity_burned", liquidity_burned)
    if reserves.total_liquidity == 0:
        raise InsufficientLiquidityError("Pool has no liquidity to withdraw")
    if liquidity_burned > reserves.total_liquidity:
        raise InvalidAmountError(
            f"Cannot burn {liquidity_burned} of {reserves.total_liquidity} total liquidity"
        )

    amount_a = liquidity_burned * reserves.reserve_a // reserves.total_liquidity
    amount_b = liquidity_burned * reserves.reserve_b // reserves.total_liquidity
    return amount_a, amount_b


def liquidity_minted(amount_a: int, amount_b: int, reserves: Reserves) -> int:
    """
    LP tokens minted for depositing (amount_a, amount_b).

    The first deposit mints sqrt(a * b); later deposits mint the smaller
    of the two proportional shares, so surplus of one token is donated.
    """
    _check_amount("amount_a", amount_a)
    _check_amount("amount_b", amount_b)

    if reserves.total_liquidity == 0:
        return isqrt(amount_a * amount_b)
    if reserves.is_empty:
        raise InsufficientLiquidityError("Pool has liquidity supply but empty reserves")

    share_a = amount_a * reserves.total_liquidity // reserves.reserve_a
    share_b = amount_b * reserves.total_liquidity // reserves.reserve_b
    return min(share_a, share_b)


def apply_add_liquidity(reserves: Reserves, amount_a: int, amount_b: int) -> Tuple[Reserves, int]:
    """Simulated reserves after a deposit, plus the LP tokens minted."""
    minted = liquidity_minted(amount_a, amount_b, reserves)
    new_reserves = Reserves(
        reserve_a=reserves.reserve_a + amount_a,
        reserve_b=reserves.reserve_b + amount_b,
        total_liquidity=reserves.total_liquidity + minted,
        block_number=reserves.block_number,
        fetched_at=reserves.fetched_at,
    )
    return new_reserves, minted


def apply_swap(reserves: Reserves, token_in_is_a: bool, amount_in: int, fee_bps: int = FEE_BPS) -> Tuple[Reserves, int]:
    """Simulated reserves after a swap, plus the output amount."""
    reserve_in, reserve_out = orient(reserves, token_in_is_a)
    amount_out = get_amount_out(reserve_in, reserve_out, amount_in, fee_bps)

    if token_in_is_a:
        reserve_a, reserve_b = reserve_in + amount_in, reserve_out - amount_out
    else:
        reserve_a, reserve_b = reserve_out - amount_out, reserve_in + amount_in

    new_reserves = Reserves(
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        total_liquidity=reserves.total_liquidity,
        block_number=reserves.block_number,
        fetched_at=reserves.fetched_at,
    )
    return new_reserves, amount_out


def user_share_percent(share_bps: int) -> Decimal:
    """LP share in percent from basis points."""
    return Decimal(share_bps) / 100


def quote_swap(
    reserves: Reserves,
    token_in_is_a: bool,
    amount_in: int,
    decimals_a: int,
    decimals_b: int,
    fee_bps: int = FEE_BPS,
    tolerance_bps: int = 50,
) -> SwapQuote:
    """
    Full quote for one swap direction against a reserves snapshot.

    token_in is reported as "A" or "B"; SwapQuoter maps it to addresses.
    """
    from .slippage import minimum_amount_out

    decimals_in, decimals_out = (decimals_a, decimals_b) if token_in_is_a else (decimals_b, decimals_a)
    reserve_in, reserve_out = orient(reserves, token_in_is_a)
    amount_out = get_amount_out(reserve_in, reserve_out, amount_in, fee_bps)

    return SwapQuote(
        token_in="A" if token_in_is_a else "B",
        amount_in=amount_in,
        amount_out=amount_out,
        exchange_rate=exchange_rate(amount_in, amount_out, decimals_in, decimals_out),
        price_impact_pct=price_impact(reserve_in, reserve_out, amount_in, amount_out),
        fee_amount=fee_amount(amount_in, fee_bps),
        minimum_amount_out=minimum_amount_out(amount_out, tolerance_bps),
    )
