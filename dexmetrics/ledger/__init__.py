"""
Ledger access: event logs, reserves and user history.
"""

from .base import LedgerReader, calculate_window_start
from .decoding import (
    EVENT_SIGNATURES,
    LIQUIDITY_ADDED,
    LIQUIDITY_REMOVED,
    SWAP,
    decode_log,
    event_topic,
)
from .errors import ErrorHandler, call_with_retry
from .history import fetch_user_transactions, user_transactions
from .reserves import ReservesReader
from .web3_reader import Web3LedgerReader

__all__ = [
    "LedgerReader",
    "calculate_window_start",
    "EVENT_SIGNATURES",
    "LIQUIDITY_ADDED",
    "LIQUIDITY_REMOVED",
    "SWAP",
    "decode_log",
    "event_topic",
    "ErrorHandler",
    "call_with_retry",
    "fetch_user_transactions",
    "user_transactions",
    "ReservesReader",
    "Web3LedgerReader",
]
