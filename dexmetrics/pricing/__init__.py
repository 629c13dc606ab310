"""
Pricing: fixed-point conversion, constant-product quoting and slippage guards.

Everything in this package is synchronous and free of I/O.
"""

from .amm import (
    BPS_DENOMINATOR,
    FEE_BPS,
    apply_add_liquidity,
    apply_swap,
    fee_amount,
    get_amount_out,
    liquidity_minted,
    quote_swap,
    price_impact,
    remove_liquidity_amounts,
    spot_price,
    user_share_percent,
)
from .fixed_point import format_fixed, format_units, parse_units, to_decimal
from .quoter import SwapQuoter, TokenPair
from .slippage import (
    DEFAULT_PREFERENCE,
    build_trade_request,
    clamp_preference,
    expiry,
    minimum_amount_out,
    slippage_warning,
    validate_preference,
)

__all__ = [
    "BPS_DENOMINATOR",
    "FEE_BPS",
    "apply_add_liquidity",
    "apply_swap",
    "fee_amount",
    "get_amount_out",
    "liquidity_minted",
    "quote_swap",
    "price_impact",
    "remove_liquidity_amounts",
    "spot_price",
    "user_share_percent",
    "format_fixed",
    "format_units",
    "parse_units",
    "to_decimal",
    "SwapQuoter",
    "TokenPair",
    "DEFAULT_PREFERENCE",
    "build_trade_request",
    "clamp_preference",
    "expiry",
    "minimum_amount_out",
    "slippage_warning",
    "validate_preference",
]
