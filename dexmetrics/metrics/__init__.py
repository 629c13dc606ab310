"""
Derived pool metrics.
"""

from .aggregator import (
    aggregate,
    current_price,
    execution_price,
    format_metrics,
    format_summary,
    price_history,
    summarize,
    total_value_locked,
)

__all__ = [
    "aggregate",
    "current_price",
    "execution_price",
    "format_metrics",
    "format_summary",
    "price_history",
    "summarize",
    "total_value_locked",
]
