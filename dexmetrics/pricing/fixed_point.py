"""
Fixed-point helpers for scaled token amounts.

Amounts live as integers scaled by 10**decimals. Strings are parsed
without going through float, and Decimal is only used for display and
for metrics that must keep full precision.
"""

import re
from decimal import ROUND_HALF_EVEN, Decimal, localcontext

from ..errors import InvalidAmountError

# Enough digits to hold any uint256 exactly
DECIMAL_PRECISION = 78

MAX_UINT256 = 2**256 - 1

_AMOUNT_RE = re.compile(r"^(\d*)(?:\.(\d*))?$")


def parse_units(text: str, decimals: int) -> int:
    """
    Convert a human readable amount into a scaled integer.

    Args:
        text: Amount such as "1.5" or "100"
        decimals: Token decimal count

    Returns:
        Scaled integer amount

    Raises:
        InvalidAmountError: If text is empty, non-numeric, negative or has
            more fractional digits than the token supports
    """
    if decimals < 0:
        raise InvalidAmountError(f"Invalid decimals: {decimals}")
    if text is None:
        raise InvalidAmountError("Amount is required")

    cleaned = str(text).strip()
    if cleaned.startswith("-"):
        raise InvalidAmountError(f"Amount must not be negative: {text!r}")

    match = _AMOUNT_RE.match(cleaned)
    if not match:
        raise InvalidAmountError(f"Amount is not a number: {text!r}")

    whole, fraction = match.group(1), match.group(2) or ""
    if not whole and not fraction:
        raise InvalidAmountError(f"Amount is not a number: {text!r}")

    whole = whole.lstrip("0")
    if len(whole) > DECIMAL_PRECISION:
        raise InvalidAmountError(f"Amount {text!r} is too large")

    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise InvalidAmountError(
            f"Amount {text!r} exceeds {decimals} decimal places"
        )

    value = int(whole or "0") * 10**decimals + int(fraction.ljust(decimals, "0") or "0")
    if value > MAX_UINT256:
        raise InvalidAmountError(f"Amount {text!r} exceeds the uint256 range")
    return value


def to_decimal(value: int, decimals: int) -> Decimal:
    """Exact Decimal value of a scaled integer."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return Decimal(value) / (Decimal(10) ** decimals)


def format_units(value: int, decimals: int) -> str:
    """
    Format a scaled integer as an exact decimal string.

    Trailing fractional zeros are dropped, e.g. 1500000 with 6 decimals
    gives "1.5".
    """
    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10**decimals)
    if decimals == 0 or fraction == 0:
        return f"{sign}{whole}"
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{fraction_str}"


def format_fixed(value: Decimal, places: int) -> str:
    """Round a Decimal to a fixed number of places for display."""
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # Room for every integer digit plus the requested places
        ctx.prec = max(DECIMAL_PRECISION, value.adjusted() + 1) + places
        return str(value.quantize(quantum, rounding=ROUND_HALF_EVEN))
