"""
Slippage and deadline guard.

Turns a quoted output into an enforceable minimum and a chosen duration
into an absolute expiry. Out-of-range user input is rejected with
InvalidPreferenceError; clamp_preference() exists for values that come
back from storage and must not block the user.
"""

import logging
from typing import Optional

from ..errors import InvalidPreferenceError
from ..models import SlippagePreference, SwapQuote, TradeRequest
from .amm import BPS_DENOMINATOR

logger = logging.getLogger(__name__)

MIN_TOLERANCE_BPS = 0
MAX_TOLERANCE_BPS = 5000
MIN_DEADLINE_MINUTES = 1
MAX_DEADLINE_MINUTES = 4320  # 3 days

# Warning thresholds shown next to the tolerance setting
HIGH_SLIPPAGE_BPS = 500
LOW_SLIPPAGE_BPS = 5

PRESET_TOLERANCES_BPS = (10, 50, 100)
PRESET_DEADLINES_MINUTES = (10, 20, 30)

DEFAULT_PREFERENCE = SlippagePreference(tolerance_bps=50, deadline_minutes=20)


def validate_tolerance(tolerance_bps: int) -> int:
    if isinstance(tolerance_bps, bool) or not isinstance(tolerance_bps, int):
        raise InvalidPreferenceError(
            f"Slippage tolerance must be an integer number of bps, got {tolerance_bps!r}",
            field="tolerance_bps",
            value=tolerance_bps,
        )
    if not MIN_TOLERANCE_BPS <= tolerance_bps <= MAX_TOLERANCE_BPS:
        raise InvalidPreferenceError(
            f"Slippage tolerance must be between {MIN_TOLERANCE_BPS} and {MAX_TOLERANCE_BPS} bps, got {tolerance_bps}",
            field="tolerance_bps",
            value=tolerance_bps,
        )
    return tolerance_bps


def validate_deadline(deadline_minutes: int) -> int:
    if isinstance(deadline_minutes, bool) or not isinstance(deadline_minutes, int):
        raise InvalidPreferenceError(
            f"Deadline must be an integer number of minutes, got {deadline_minutes!r}",
            field="deadline_minutes",
            value=deadline_minutes,
        )
    if not MIN_DEADLINE_MINUTES <= deadline_minutes <= MAX_DEADLINE_MINUTES:
        raise InvalidPreferenceError(
            f"Deadline must be between {MIN_DEADLINE_MINUTES} and {MAX_DEADLINE_MINUTES} minutes, got {deadline_minutes}",
            field="deadline_minutes",
            value=deadline_minutes,
        )
    return deadline_minutes


def validate_preference(preference: SlippagePreference) -> SlippagePreference:
    """Return the preference unchanged or raise InvalidPreferenceError."""
    validate_tolerance(preference.tolerance_bps)
    validate_deadline(preference.deadline_minutes)
    return preference


def clamp_preference(tolerance_bps: int, deadline_minutes: int) -> SlippagePreference:
    """Build a preference, pulling out-of-range values to the nearest bound."""
    tolerance = min(max(int(tolerance_bps), MIN_TOLERANCE_BPS), MAX_TOLERANCE_BPS)
    deadline = min(max(int(deadline_minutes), MIN_DEADLINE_MINUTES), MAX_DEADLINE_MINUTES)
    if tolerance != tolerance_bps or deadline != deadline_minutes:
        logger.warning(
            f"Clamped preference ({tolerance_bps} bps, {deadline_minutes} min) "
            f"to ({tolerance} bps, {deadline} min)"
        )
    return SlippagePreference(tolerance_bps=tolerance, deadline_minutes=deadline)


def minimum_amount_out(quoted_amount_out: int, tolerance_bps: int) -> int:
    """
    Smallest acceptable output for a quote.

    quoted * (10000 - tolerance_bps) / 10000, rounded down.
    """
    validate_tolerance(tolerance_bps)
    if quoted_amount_out < 0:
        raise InvalidPreferenceError("Quoted amount must be non-negative", value=quoted_amount_out)
    return quoted_amount_out * (BPS_DENOMINATOR - tolerance_bps) // BPS_DENOMINATOR


def expiry(now: int, deadline_minutes: int) -> int:
    """Absolute unix deadline for a trade submitted at now."""
    validate_deadline(deadline_minutes)
    return int(now) + deadline_minutes * 60


def slippage_warning(tolerance_bps: int) -> Optional[str]:
    """
    "high" when the tolerance risks unfavourable fills, "low" when the
    trade is likely to revert, otherwise None.
    """
    if tolerance_bps > HIGH_SLIPPAGE_BPS:
        return "high"
    if tolerance_bps < LOW_SLIPPAGE_BPS:
        return "low"
    return None


def build_trade_request(
    quote: SwapQuote,
    preference: SlippagePreference,
    now: int,
) -> TradeRequest:
    """Submit-ready request with the slippage floor and deadline applied."""
    validate_preference(preference)
    return TradeRequest(
        token_in=quote.token_in,
        amount_in=quote.amount_in,
        minimum_amount_out=minimum_amount_out(quote.amount_out, preference.tolerance_bps),
        deadline=expiry(now, preference.deadline_minutes),
    )
