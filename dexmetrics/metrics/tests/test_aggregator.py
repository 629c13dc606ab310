"""Tests for pool metrics aggregation."""
from decimal import Decimal

import pytest

from dexmetrics.metrics.aggregator import (
    aggregate,
    current_price,
    execution_price,
    format_metrics,
    format_summary,
    price_history,
    summarize,
    total_value_locked,
)
from dexmetrics.models import EventWindow, LiquidityEvent, LiquidityEventKind, Reserves, SwapEvent
from dexmetrics.pricing.quoter import TokenPair

TOKEN_A = "0x" + "aa" * 20
TOKEN_B = "0x" + "bb" * 20
ALICE = "0x" + "a1" * 20
BOB = "0x" + "b0" * 20

A = 10**18
B = 10**6


@pytest.fixture
def pair():
    return TokenPair(TOKEN_A, TOKEN_B, 18, 6, "MTK", "sUSDC")


@pytest.fixture
def reserves():
    return Reserves(reserve_a=1000 * A, reserve_b=2000 * B, total_liquidity=10**21, block_number=200)


def swap(user, token_in, amount_in, amount_out, block, timestamp=0, log_index=0):
    return SwapEvent(
        user=user,
        token_in=token_in,
        amount_in=amount_in,
        amount_out=amount_out,
        block_number=block,
        timestamp=timestamp,
        log_index=log_index,
    )


def window(swaps=(), liquidity=(), from_block=100, to_block=200):
    return EventWindow(swaps=tuple(swaps), liquidity_events=tuple(liquidity), from_block=from_block, to_block=to_block)


class TestPrices:
    def test_execution_price_a_in(self, pair):
        assert execution_price(swap(ALICE, TOKEN_A, 50 * A, 95 * B, 1), pair) == Decimal("1.9")

    def test_execution_price_b_in(self, pair):
        assert execution_price(swap(ALICE, TOKEN_B, 20 * B, 10 * A, 1), pair) == Decimal(2)

    def test_execution_price_degenerate(self, pair):
        assert execution_price(swap(ALICE, TOKEN_A, 0, 0, 1), pair) == 0

    def test_current_price_and_tvl(self, pair, reserves):
        assert current_price(reserves, pair) == Decimal(2)
        assert total_value_locked(reserves, pair) == Decimal(3000)

    def test_current_price_empty_pool(self, pair):
        assert current_price(Reserves(0, 0, 0), pair) == 0


class TestAggregate:
    def test_window_with_swaps(self, pair, reserves):
        events = window([
            swap(ALICE, TOKEN_A, 50 * A, 95 * B, 110, timestamp=1000),
            swap(BOB, TOKEN_A, 30 * A, 57 * B, 150, timestamp=2000),
        ])

        metrics = aggregate(events, reserves, pair)
        formatted = format_metrics(metrics)

        assert metrics.volume_24h == Decimal(80)
        assert formatted["tvl"] == "3000.00"
        assert formatted["volume_24h"] == "80.00"
        assert formatted["fees_24h"] == "0.2400"
        assert formatted["apr"] == "2.92"
        assert formatted["price_change_24h"] == "5.26"
        assert formatted["current_price"] == "2.0000"
        assert metrics.total_transactions == 2
        assert metrics.unique_users == 2
        assert (metrics.from_block, metrics.to_block) == (100, 200)

    def test_b_in_swap_counts_token_a_leg(self, pair, reserves):
        metrics = aggregate(window([swap(ALICE, TOKEN_B, 20 * B, 10 * A, 120)]), reserves, pair)

        assert metrics.volume_24h == Decimal(10)
        assert metrics.price_change_24h == 0

    def test_unique_users_case_insensitive(self, pair, reserves):
        events = window([
            swap(ALICE, TOKEN_A, A, 2 * B, 110),
            swap(ALICE.upper().replace("0X", "0x"), TOKEN_A, A, 2 * B, 111),
        ])

        assert aggregate(events, reserves, pair).unique_users == 1

    def test_liquidity_events_count_as_transactions(self, pair, reserves):
        added = LiquidityEvent(BOB, 10 * A, 20 * B, 10**19, LiquidityEventKind.ADDED, 105)
        events = window([swap(ALICE, TOKEN_A, A, 2 * B, 110)], [added])

        metrics = aggregate(events, reserves, pair)

        assert metrics.total_transactions == 2
        assert metrics.unique_users == 1

    def test_empty_window(self, pair):
        metrics = aggregate(EventWindow.empty(0, 0), Reserves(0, 0, 0), pair)
        formatted = format_metrics(metrics)

        assert formatted["tvl"] == "0.00"
        assert formatted["volume_24h"] == "0.00"
        assert formatted["fees_24h"] == "0.0000"
        assert formatted["apr"] == "0.00"
        assert formatted["price_change_24h"] == "0.00"
        assert metrics.total_transactions == 0
        assert metrics.price_history == ()

    def test_liquidity_only_window(self, pair, reserves):
        added = LiquidityEvent(BOB, 10 * A, 20 * B, 10**19, LiquidityEventKind.ADDED, 105)
        removed = LiquidityEvent(BOB, 5 * A, 10 * B, 5 * 10**18, LiquidityEventKind.REMOVED, 150)

        metrics = aggregate(window(liquidity=[added, removed]), reserves, pair)
        formatted = format_metrics(metrics)

        assert formatted["tvl"] == "3000.00"
        assert formatted["current_price"] == "2.0000"
        assert metrics.volume_24h == 0
        assert metrics.fees_24h == 0
        assert metrics.apr == 0
        assert metrics.price_change_24h == 0
        assert metrics.total_transactions == 2
        assert metrics.unique_users == 0

    def test_reserves_near_uint256_limit_format(self):
        max_uint = 2**256 - 1
        whole_tokens = TokenPair(TOKEN_A, TOKEN_B, 0, 0)

        metrics = aggregate(EventWindow.empty(0, 0), Reserves(max_uint, max_uint, 1), whole_tokens)
        formatted = format_metrics(metrics)

        assert formatted["tvl"] == f"{2 * max_uint}.00"
        assert formatted["current_price"] == "1.0000"
        assert formatted["apr"] == "0.00"

    def test_custom_fee(self, pair, reserves):
        metrics = aggregate(window([swap(ALICE, TOKEN_A, 100 * A, 190 * B, 110)]), reserves, pair, fee_bps=100)

        assert metrics.fees_24h == Decimal(1)


class TestPriceHistory:
    def test_keeps_most_recent_points(self, pair):
        swaps = [swap(ALICE, TOKEN_A, A, (i + 1) * B, 100 + i, timestamp=i) for i in range(30)]

        history = price_history(window(swaps), pair, points=24)

        assert len(history) == 24
        assert history[0].timestamp == 6
        assert history[-1].price == Decimal(30)

    def test_zero_points(self, pair):
        assert price_history(window([swap(ALICE, TOKEN_A, A, B, 100)]), pair, points=0) == []


class TestFormatting:
    def test_symbols_added_with_pair(self, pair, reserves):
        formatted = format_metrics(aggregate(window(), reserves, pair), pair)

        assert formatted["symbol_a"] == "MTK"
        assert formatted["symbol_b"] == "sUSDC"

    def test_summary(self, pair, reserves):
        summary = summarize(window([swap(ALICE, TOKEN_A, 50 * A, 95 * B, 110)]), reserves, pair)

        assert format_summary(summary) == {"tvl": "3000.00", "volume_24h": "50.00", "current_price": "2.0000"}
