"""
Core domain types for pool analytics and quoting.

All values are immutable: a refresh produces new objects rather than
mutating existing ones, so readers never observe a torn mix of fields.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple, Union

from .errors import InvalidAmountError


class LiquidityEventKind(Enum):
    """Direction of a liquidity change."""
    ADDED = "added"
    REMOVED = "removed"


class TransactionKind(Enum):
    """Kinds of user transactions shown in the history view."""
    SWAP = "swap"
    ADD_LIQUIDITY = "add_liquidity"
    REMOVE_LIQUIDITY = "remove_liquidity"


@dataclass(frozen=True)
class Reserves:
    """
    Snapshot of pool state at a given block.

    Attributes:
        reserve_a: Scaled reserve of token A
        reserve_b: Scaled reserve of token B
        total_liquidity: Total LP supply
        block_number: Block the reserves were read at (optional)
        fetched_at: Unix time the reserves were read
    """

    reserve_a: int
    reserve_b: int
    total_liquidity: int
    block_number: Optional[int] = None
    fetched_at: float = field(default_factory=time.time)

    def __post_init__(self):
        for name in ("reserve_a", "reserve_b", "total_liquidity"):
            if getattr(self, name) < 0:
                raise InvalidAmountError(f"{name} must be non-negative, got {getattr(self, name)}")

    @property
    def is_empty(self) -> bool:
        return self.reserve_a == 0 or self.reserve_b == 0

    def age(self, now: Optional[float] = None) -> float:
        """Seconds elapsed since these reserves were read."""
        return (now if now is not None else time.time()) - self.fetched_at


@dataclass(frozen=True)
class SwapEvent:
    """
    Decoded Swap event.

    Attributes:
        user: Address that performed the swap
        token_in: Address of the input token
        amount_in: Scaled input amount
        amount_out: Scaled output amount
        block_number: Block the swap was mined in
        timestamp: Block timestamp (unix seconds)
        tx_hash: Transaction hash
        log_index: Position of the log within the block
    """

    user: str
    token_in: str
    amount_in: int
    amount_out: int
    block_number: int
    timestamp: int = 0
    tx_hash: str = ""
    log_index: int = 0


@dataclass(frozen=True)
class LiquidityEvent:
    """
    Decoded LiquidityAdded / LiquidityRemoved event.

    Attributes:
        provider: Liquidity provider address
        amount_a: Scaled token A amount
        amount_b: Scaled token B amount
        liquidity_delta: LP tokens minted or burned
        kind: ADDED or REMOVED
        block_number: Block the event was mined in
        timestamp: Block timestamp (unix seconds)
        tx_hash: Transaction hash
        log_index: Position of the log within the block
    """

    provider: str
    amount_a: int
    amount_b: int
    liquidity_delta: int
    kind: LiquidityEventKind
    block_number: int
    timestamp: int = 0
    tx_hash: str = ""
    log_index: int = 0


@dataclass(frozen=True)
class EventWindow:
    """Events of one block range, each sequence ordered by (block, log index)."""

    swaps: Tuple[SwapEvent, ...]
    liquidity_events: Tuple[LiquidityEvent, ...]
    from_block: int
    to_block: int

    @property
    def added(self) -> Tuple[LiquidityEvent, ...]:
        return tuple(e for e in self.liquidity_events if e.kind is LiquidityEventKind.ADDED)

    @property
    def removed(self) -> Tuple[LiquidityEvent, ...]:
        return tuple(e for e in self.liquidity_events if e.kind is LiquidityEventKind.REMOVED)

    @classmethod
    def empty(cls, from_block: int = 0, to_block: int = 0) -> "EventWindow":
        return cls(swaps=(), liquidity_events=(), from_block=from_block, to_block=to_block)


@dataclass(frozen=True)
class PricePoint:
    """Execution price of a swap at a point in time (token B per token A)."""

    timestamp: int
    price: Decimal


@dataclass(frozen=True)
class PoolMetrics:
    """
    Derived pool metrics for one aggregation cycle.

    Decimal fields keep full precision; rounding happens only when the
    metrics are formatted for display.
    """

    tvl: Decimal
    volume_24h: Decimal
    fees_24h: Decimal
    total_transactions: int
    unique_users: int
    price_change_24h: Decimal
    apr: Decimal
    current_price: Decimal
    price_history: Tuple[PricePoint, ...] = ()
    from_block: Optional[int] = None
    to_block: Optional[int] = None


@dataclass(frozen=True)
class PoolSummary:
    """Lightweight pool view: TVL, 24h volume and current price."""

    tvl: Decimal
    volume_24h: Decimal
    current_price: Decimal


@dataclass(frozen=True)
class SwapQuote:
    """
    Quote for a prospective swap.

    Attributes:
        token_in: Address (or symbol) of the input token
        amount_in: Scaled input amount
        amount_out: Scaled expected output amount
        exchange_rate: Output per input in display units
        price_impact_pct: Price impact in percent
        fee_amount: Scaled fee charged on the input
        minimum_amount_out: Scaled output floor after slippage tolerance
        stale: True when the reserves were older than one refresh interval
    """

    token_in: str
    amount_in: int
    amount_out: int
    exchange_rate: Decimal
    price_impact_pct: Decimal
    fee_amount: int
    minimum_amount_out: int
    stale: bool = False

    def __post_init__(self):
        if self.minimum_amount_out > self.amount_out:
            raise InvalidAmountError("minimum_amount_out cannot exceed amount_out")


@dataclass(frozen=True)
class SlippagePreference:
    """User risk preferences; defaults to 0.5% tolerance and 20 minutes."""

    tolerance_bps: int = 50
    deadline_minutes: int = 20

    @property
    def tolerance_percent(self) -> Decimal:
        return Decimal(self.tolerance_bps) / Decimal(100)


@dataclass(frozen=True)
class TradeRequest:
    """Submit-ready tuple handed to the host for signing and submission."""

    token_in: str
    amount_in: int
    minimum_amount_out: int
    deadline: int


@dataclass(frozen=True)
class UserLiquidity:
    """A provider's LP balance and pool share in basis points."""

    amount: int
    share_bps: int

    @property
    def share_percent(self) -> Decimal:
        return Decimal(self.share_bps) / Decimal(100)


@dataclass(frozen=True)
class UserTransaction:
    """One entry of a user's transaction history."""

    tx_hash: str
    kind: TransactionKind
    timestamp: int
    block_number: int
    token_in: Optional[str] = None
    amount_in: Optional[int] = None
    amount_out: Optional[int] = None
    amount_a: Optional[int] = None
    amount_b: Optional[int] = None
    liquidity_delta: Optional[int] = None


@dataclass(frozen=True)
class PublishedSnapshot:
    """The value the scheduler swaps atomically: metrics plus the reserves they came from."""

    metrics: Union[PoolMetrics, PoolSummary]
    reserves: Reserves
    published_at: float = field(default_factory=time.time)
