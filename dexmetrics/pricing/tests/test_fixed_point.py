"""Tests for fixed-point amount conversion."""
from decimal import Decimal

import pytest

from dexmetrics.errors import InvalidAmountError
from dexmetrics.pricing.fixed_point import MAX_UINT256, format_fixed, format_units, parse_units, to_decimal


class TestParseUnits:
    """Decimal strings to scaled integers."""

    @pytest.mark.parametrize("text,decimals,expected", [
        ("1", 18, 10**18),
        ("1.5", 6, 1_500_000),
        ("0.000001", 6, 1),
        ("  42.10 ", 6, 42_100_000),
        (".5", 6, 500_000),
        ("1.", 6, 1_000_000),
        ("0", 18, 0),
        ("1.500000000", 6, 1_500_000),
    ])
    def test_valid_amounts(self, text, decimals, expected):
        assert parse_units(text, decimals) == expected

    @pytest.mark.parametrize("text", ["", "   ", ".", "abc", "1.2.3", "1e18", "0x10", "1,5"])
    def test_rejects_non_numeric(self, text):
        with pytest.raises(InvalidAmountError):
            parse_units(text, 18)

    def test_rejects_negative(self):
        with pytest.raises(InvalidAmountError, match="negative"):
            parse_units("-1", 18)

    def test_rejects_excess_precision(self):
        with pytest.raises(InvalidAmountError, match="decimal places"):
            parse_units("0.0000001", 6)

    def test_no_float_rounding(self):
        """Values that are inexact as floats stay exact."""
        assert parse_units("0.1", 18) + parse_units("0.2", 18) == parse_units("0.3", 18)

    def test_large_values_exact(self):
        assert parse_units("123456789012345678901234567890.123456789012345678", 18) == (
            123456789012345678901234567890123456789012345678
        )

    def test_rejects_oversized_digit_strings(self):
        with pytest.raises(InvalidAmountError, match="too large"):
            parse_units("9" * 5000, 18)

    def test_rejects_values_above_uint256(self):
        assert parse_units(str(MAX_UINT256), 0) == MAX_UINT256
        with pytest.raises(InvalidAmountError, match="uint256"):
            parse_units(str(MAX_UINT256 + 1), 0)
        with pytest.raises(InvalidAmountError, match="uint256"):
            parse_units(str(MAX_UINT256), 18)

    def test_leading_zeros_do_not_count_as_digits(self):
        assert parse_units("0" * 100 + "1", 0) == 1


class TestFormatting:
    """Display conversions."""

    def test_format_units_trims_zeros(self):
        assert format_units(1_500_000, 6) == "1.5"
        assert format_units(10**18, 18) == "1"
        assert format_units(1, 18) == "0.000000000000000001"

    def test_format_units_round_trips_parse(self):
        assert format_units(parse_units("98.7654", 18), 18) == "98.7654"

    def test_to_decimal_is_exact(self):
        assert to_decimal(90909090909090909090, 18) == Decimal("90.90909090909090909")

    def test_format_fixed_half_even(self):
        assert format_fixed(Decimal("0.125"), 2) == "0.12"
        assert format_fixed(Decimal("0.135"), 2) == "0.14"
        assert format_fixed(Decimal("2.92"), 2) == "2.92"
        assert format_fixed(Decimal("0.24"), 4) == "0.2400"

    def test_format_fixed_beyond_uint256_digits(self):
        value = Decimal(2 * MAX_UINT256)

        assert format_fixed(value, 2) == f"{2 * MAX_UINT256}.00"
        assert format_fixed(value, 4) == f"{2 * MAX_UINT256}.0000"
