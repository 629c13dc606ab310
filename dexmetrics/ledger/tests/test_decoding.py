"""Tests for log and call response decoding."""
import pytest
from eth_abi import encode
from hexbytes import HexBytes
from web3 import Web3

from dexmetrics.errors import EventDecodeError
from dexmetrics.ledger import decoding
from dexmetrics.models import LiquidityEventKind


class TestTopics:
    def test_swap_topic_matches_keccak(self):
        expected = Web3.keccak(text="Swap(address,address,uint256,uint256)")
        assert decoding.event_topic(decoding.EVENT_SIGNATURES[decoding.SWAP]) == expected

    def test_function_selector_is_four_bytes(self):
        assert len(decoding.function_selector(decoding.GET_RESERVES_SIGNATURE)) == 4


class TestDecodeLogs:
    def test_decode_swap(self, logs):
        event = decoding.decode_swap(logs.swap(logs.USER, logs.TOKEN_A, 5, 7, 42, 3), timestamp=1234)

        assert event.user == Web3.to_checksum_address(logs.USER)
        assert event.token_in == Web3.to_checksum_address(logs.TOKEN_A)
        assert (event.amount_in, event.amount_out) == (5, 7)
        assert (event.block_number, event.log_index, event.timestamp) == (42, 3, 1234)
        assert event.tx_hash.startswith("0x") and len(event.tx_hash) == 66

    def test_decode_liquidity_removed(self, logs):
        log = logs.liquidity(decoding.LIQUIDITY_REMOVED, logs.USER, 1, 2, 3, 9, 0)
        event = decoding.decode_log(log, decoding.LIQUIDITY_REMOVED)

        assert event.kind is LiquidityEventKind.REMOVED
        assert (event.amount_a, event.amount_b, event.liquidity_delta) == (1, 2, 3)

    def test_wrong_topic_rejected(self, logs):
        log = logs.liquidity(decoding.LIQUIDITY_ADDED, logs.USER, 1, 2, 3, 9, 0)
        with pytest.raises(EventDecodeError):
            decoding.decode_log(log, decoding.LIQUIDITY_REMOVED)

    def test_truncated_data_rejected(self, logs):
        log = logs.swap(logs.USER, logs.TOKEN_A, 5, 7, 42)
        log["data"] = HexBytes(b"\x00" * 10)
        with pytest.raises(EventDecodeError):
            decoding.decode_swap(log)

    def test_unknown_event(self, logs):
        with pytest.raises(EventDecodeError):
            decoding.decode_log(logs.swap(logs.USER, logs.TOKEN_A, 1, 1, 1), "Sync")

    def test_dedupe_and_sort(self, logs):
        a = logs.swap(logs.USER, logs.TOKEN_A, 1, 1, 10, 2)
        b = logs.swap(logs.USER, logs.TOKEN_A, 1, 1, 10, 1)
        c = logs.swap(logs.USER, logs.TOKEN_A, 1, 1, 9, 5)
        ordered = decoding.dedupe_and_sort([a, b, c, dict(a)])
        assert [(log["blockNumber"], log["logIndex"]) for log in ordered] == [(9, 5), (10, 1), (10, 2)]


class TestDecodeResponses:
    def test_decode_reserves(self):
        raw = encode(["uint256", "uint256", "uint256"], [1000, 2000, 1500])
        reserves = decoding.decode_reserves(raw, block_number=7)
        assert (reserves.reserve_a, reserves.reserve_b, reserves.total_liquidity) == (1000, 2000, 1500)
        assert reserves.block_number == 7

    def test_decode_user_liquidity(self):
        raw = encode(["uint256", "uint256"], [5 * 10**17, 2500])
        position = decoding.decode_user_liquidity(raw)
        assert position.amount == 5 * 10**17
        assert str(position.share_percent) == "25"

    def test_malformed_reserves(self):
        with pytest.raises(EventDecodeError):
            decoding.decode_reserves(b"\x01\x02")
