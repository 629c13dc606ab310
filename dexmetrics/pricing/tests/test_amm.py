"""Tests for the constant-product pricing model."""
from decimal import Decimal

import pytest

from dexmetrics.errors import InsufficientLiquidityError, InvalidAmountError
from dexmetrics.models import Reserves
from dexmetrics.pricing import amm
from dexmetrics.pricing.fixed_point import format_fixed, to_decimal

E18 = 10**18


class TestGetAmountOut:
    """Output amount calculation."""

    def test_fee_free_reference_scenario(self):
        """1000/1000 reserves, 100 in, no fee: ~90.909 out."""
        out = amm.get_amount_out(1000 * E18, 1000 * E18, 100 * E18, fee_bps=0)
        assert format_fixed(to_decimal(out, 18), 3) == "90.909"

    def test_default_fee_scenario(self):
        """Same trade with the 0.3% fee: ~90.66 out."""
        out = amm.get_amount_out(1000 * E18, 1000 * E18, 100 * E18)
        assert format_fixed(to_decimal(out, 18), 2) == "90.66"

    def test_zero_input_gives_zero(self):
        assert amm.get_amount_out(1000, 1000, 0) == 0

    @pytest.mark.parametrize("reserve_in,reserve_out", [(0, 1000), (1000, 0), (0, 0)])
    def test_empty_pool_raises(self, reserve_in, reserve_out):
        with pytest.raises(InsufficientLiquidityError):
            amm.get_amount_out(reserve_in, reserve_out, 10)

    def test_negative_input_raises(self):
        with pytest.raises(InvalidAmountError):
            amm.get_amount_out(1000, 1000, -1)

    def test_never_drains_output_reserve(self):
        for amount_in in (1, 10**6, 10**30, 10**60):
            assert amm.get_amount_out(1000, 1000, amount_in) < 1000

    def test_monotone_in_amount(self):
        previous = 0
        for amount_in in range(0, 5000, 37):
            out = amm.get_amount_out(10_000, 7_500, amount_in)
            assert out >= previous
            previous = out

    def test_fee_reduces_output(self):
        assert amm.get_amount_out(10**9, 10**9, 10**6, fee_bps=30) < amm.get_amount_out(10**9, 10**9, 10**6, fee_bps=0)


class TestPriceImpact:
    """Impact from simulated post-trade reserves."""

    def test_fee_free_reference_scenario(self):
        out = amm.get_amount_out(1000 * E18, 1000 * E18, 100 * E18, fee_bps=0)
        impact = amm.price_impact(1000 * E18, 1000 * E18, 100 * E18, out)
        assert format_fixed(impact, 2) == "17.36"

    def test_zero_input_zero_impact(self):
        assert amm.price_impact(1000, 1000, 0, 0) == Decimal(0)

    def test_larger_trades_move_price_more(self):
        small = amm.price_impact(10**6, 10**6, 10**3, amm.get_amount_out(10**6, 10**6, 10**3))
        large = amm.price_impact(10**6, 10**6, 10**5, amm.get_amount_out(10**6, 10**6, 10**5))
        assert large > small > 0


class TestHelpers:
    """Fees, prices and orientation."""

    def test_fee_amount(self):
        assert amm.fee_amount(100 * E18) == 3 * E18 // 10

    def test_spot_price_adjusts_decimals(self):
        assert amm.spot_price(1000 * E18, 2000 * 10**6, 18, 6) == Decimal(2)

    def test_spot_price_empty_pool(self):
        with pytest.raises(InsufficientLiquidityError):
            amm.spot_price(0, 10)

    def test_exchange_rate(self):
        assert amm.exchange_rate(2 * E18, 3 * 10**6, 18, 6) == Decimal("1.5")
        assert amm.exchange_rate(0, 0, 18, 6) == Decimal(0)

    def test_orient(self):
        reserves = Reserves(reserve_a=1, reserve_b=2, total_liquidity=1)
        assert amm.orient(reserves, True) == (1, 2)
        assert amm.orient(reserves, False) == (2, 1)

    def test_user_share_percent(self):
        assert amm.user_share_percent(2550) == Decimal("25.5")


class TestLiquidity:
    """Mint and burn."""

    def test_remove_liquidity_proportional(self):
        reserves = Reserves(reserve_a=1000, reserve_b=4000, total_liquidity=2000)
        assert amm.remove_liquidity_amounts(500, reserves) == (250, 1000)

    def test_remove_from_empty_pool(self):
        with pytest.raises(InsufficientLiquidityError):
            amm.remove_liquidity_amounts(1, Reserves(reserve_a=0, reserve_b=0, total_liquidity=0))

    def test_remove_more_than_total(self):
        reserves = Reserves(reserve_a=1000, reserve_b=1000, total_liquidity=1000)
        with pytest.raises(InvalidAmountError):
            amm.remove_liquidity_amounts(1001, reserves)

    def test_first_deposit_mints_geometric_mean(self):
        empty = Reserves(reserve_a=0, reserve_b=0, total_liquidity=0)
        assert amm.liquidity_minted(4 * E18, 9 * E18, empty) == 6 * E18

    @pytest.mark.parametrize("amount_a,amount_b", [
        (10**18, 2 * 10**6),
        (123_456_789, 987_654),
        (10**20, 3),
        (7, 10**15),
    ])
    def test_add_then_remove_never_returns_more(self, amount_a, amount_b):
        reserves = Reserves(reserve_a=1000 * E18, reserve_b=2000 * 10**6, total_liquidity=10**21)
        after, minted = amm.apply_add_liquidity(reserves, amount_a, amount_b)
        back_a, back_b = amm.remove_liquidity_amounts(minted, after)
        assert back_a <= amount_a
        assert back_b <= amount_b

    def test_apply_swap_preserves_invariant(self):
        reserves = Reserves(reserve_a=10**9, reserve_b=10**9, total_liquidity=10**9)
        after, out = amm.apply_swap(reserves, True, 10**7)
        assert after.reserve_a == reserves.reserve_a + 10**7
        assert after.reserve_b == reserves.reserve_b - out
        assert after.reserve_a * after.reserve_b >= reserves.reserve_a * reserves.reserve_b


class TestQuoteSwap:
    """Full quote assembly."""

    def test_quote_fields(self):
        reserves = Reserves(reserve_a=1000 * E18, reserve_b=1000 * E18, total_liquidity=1000 * E18)
        quote = amm.quote_swap(reserves, True, 100 * E18, 18, 18, fee_bps=0, tolerance_bps=100)

        assert quote.token_in == "A"
        assert quote.fee_amount == 0
        assert format_fixed(to_decimal(quote.amount_out, 18), 3) == "90.909"
        assert format_fixed(quote.price_impact_pct, 2) == "17.36"
        # 1% tolerance on ~90.909
        minimum = to_decimal(quote.minimum_amount_out, 18)
        assert Decimal("89.99") <= minimum < Decimal("90")
        assert quote.minimum_amount_out <= quote.amount_out
