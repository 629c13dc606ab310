"""Shared fixtures for ledger tests."""
import pytest
from eth_abi import encode
from hexbytes import HexBytes

from dexmetrics.ledger.decoding import EVENT_SIGNATURES, LIQUIDITY_ADDED, LIQUIDITY_REMOVED, SWAP, event_topic


class LogFactory:
    """Builds raw logs in the shape eth_getLogs returns."""

    POOL = "0x" + "11" * 20
    USER = "0x" + "22" * 20
    OTHER_USER = "0x" + "33" * 20
    TOKEN_A = "0x" + "aa" * 20
    TOKEN_B = "0x" + "bb" * 20

    @staticmethod
    def address_topic(address: str) -> HexBytes:
        return HexBytes(b"\x00" * 12 + bytes.fromhex(address[2:]))

    @staticmethod
    def tx_hash(n: int) -> HexBytes:
        return HexBytes(n.to_bytes(32, "big"))

    def swap(self, user, token_in, amount_in, amount_out, block_number, log_index=0):
        return {
            "address": self.POOL,
            "topics": [
                event_topic(EVENT_SIGNATURES[SWAP]),
                self.address_topic(user),
                self.address_topic(token_in),
            ],
            "data": HexBytes(encode(["uint256", "uint256"], [amount_in, amount_out])),
            "blockNumber": block_number,
            "logIndex": log_index,
            "transactionHash": self.tx_hash(block_number * 1000 + log_index),
        }

    def liquidity(self, event_name, provider, amount_a, amount_b, liquidity, block_number, log_index=0):
        return {
            "address": self.POOL,
            "topics": [event_topic(EVENT_SIGNATURES[event_name]), self.address_topic(provider)],
            "data": HexBytes(encode(["uint256", "uint256", "uint256"], [amount_a, amount_b, liquidity])),
            "blockNumber": block_number,
            "logIndex": log_index,
            "transactionHash": self.tx_hash(block_number * 1000 + log_index),
        }


@pytest.fixture
def logs():
    return LogFactory()


@pytest.fixture
def sample_logs(logs):
    """Raw logs per event name, deliberately out of order."""
    return {
        SWAP: [
            logs.swap(logs.USER, logs.TOKEN_A, 50 * 10**18, 95 * 10**6, 120, 3),
            logs.swap(logs.OTHER_USER, logs.TOKEN_B, 20 * 10**6, 10 * 10**18, 110, 1),
        ],
        LIQUIDITY_ADDED: [
            logs.liquidity(LIQUIDITY_ADDED, logs.USER, 100 * 10**18, 200 * 10**6, 10**18, 105, 0),
        ],
        LIQUIDITY_REMOVED: [
            logs.liquidity(LIQUIDITY_REMOVED, logs.USER, 10 * 10**18, 20 * 10**6, 10**17, 120, 1),
        ],
    }
