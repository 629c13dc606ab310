"""
dexmetrics: analytics and quoting core for a constant-product AMM pool.

Derives pool metrics from on-chain Swap/Liquidity events and computes
swap quotes with slippage and deadline guards.
"""

__version__ = "0.1.0"
