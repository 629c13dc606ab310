"""
Swap quote assembly.

Combines the pricing model with the slippage guard against a reserves
snapshot. Quotes are request scoped and stateless, so they are safe to
compute while a refresh is in flight.
"""

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

from ..errors import InsufficientLiquidityError, InvalidAmountError, StaleSnapshotError
from ..models import Reserves, SlippagePreference, SwapQuote
from . import amm
from .fixed_point import parse_units
from .slippage import DEFAULT_PREFERENCE, validate_preference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    """
    The two tokens of the pool.

    Attributes:
        token_a: Token A address
        token_b: Token B address
        decimals_a: Token A decimals
        decimals_b: Token B decimals
        symbol_a: Display symbol for token A
        symbol_b: Display symbol for token B
    """

    token_a: str
    token_b: str
    decimals_a: int = 18
    decimals_b: int = 6
    symbol_a: str = "A"
    symbol_b: str = "B"

    def is_token_a(self, token: str) -> bool:
        """Match by address (case-insensitive) or symbol."""
        lowered = token.lower()
        if lowered in (self.token_a.lower(), self.symbol_a.lower()):
            return True
        if lowered in (self.token_b.lower(), self.symbol_b.lower()):
            return False
        raise InvalidAmountError(f"Token {token} is not part of this pool")

    def decimals_for(self, token_is_a: bool) -> int:
        return self.decimals_a if token_is_a else self.decimals_b


class SwapQuoter:
    """
    Quote calculator bound to one pool.

    Reserves are pulled from reserves_provider (usually the published
    snapshot) unless passed explicitly.
    """

    def __init__(
        self,
        pair: TokenPair,
        fee_bps: int = amm.FEE_BPS,
        max_age_seconds: float = 30.0,
        reserves_provider: Optional[Callable[[], Optional[Reserves]]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.pair = pair
        self.fee_bps = fee_bps
        self.max_age_seconds = max_age_seconds
        self.reserves_provider = reserves_provider
        self.clock = clock

    @classmethod
    def from_store(
        cls,
        store,
        pair: TokenPair,
        fee_bps: int = amm.FEE_BPS,
        max_age_seconds: float = 30.0,
        clock: Callable[[], float] = time.time,
    ) -> "SwapQuoter":
        """
        Quoter reading reserves from a snapshot store's latest publication.

        max_age_seconds should be the store's refresh interval, so a quote
        is flagged stale once a refresh has been missed.
        """
        return cls(
            pair,
            fee_bps=fee_bps,
            max_age_seconds=max_age_seconds,
            reserves_provider=store.latest_reserves,
            clock=clock,
        )

    def _resolve_reserves(self, reserves: Optional[Reserves]) -> Reserves:
        if reserves is not None:
            return reserves
        if self.reserves_provider is not None:
            provided = self.reserves_provider()
            if provided is not None:
                return provided
        raise InsufficientLiquidityError("No reserves snapshot available yet")

    def _check_freshness(self, reserves: Reserves, strict: bool) -> bool:
        age = reserves.age(self.clock())
        if age <= self.max_age_seconds:
            return False
        message = f"Quoting against reserves {age:.1f}s old (max {self.max_age_seconds}s)"
        if strict:
            raise StaleSnapshotError(message, age_seconds=age, max_age_seconds=self.max_age_seconds)
        logger.warning(message)
        return True

    def quote(
        self,
        token_in: str,
        amount_in: Union[int, str],
        reserves: Optional[Reserves] = None,
        preference: Optional[SlippagePreference] = None,
        strict: bool = False,
    ) -> SwapQuote:
        """
        Quote a swap of amount_in of token_in.

        Args:
            token_in: Input token address or symbol
            amount_in: Scaled integer, or a display string parsed with the
                token's decimals
            reserves: Reserves to quote against (defaults to the provider)
            preference: Slippage preference for the minimum received
            strict: Raise StaleSnapshotError instead of flagging the quote

        Returns:
            SwapQuote

        Raises:
            InvalidAmountError: If amount_in cannot be parsed
            InsufficientLiquidityError: If the pool is empty
            StaleSnapshotError: If strict and the reserves are too old
        """
        preference = validate_preference(preference or DEFAULT_PREFERENCE)
        token_in_is_a = self.pair.is_token_a(token_in)
        decimals_in = self.pair.decimals_for(token_in_is_a)

        if isinstance(amount_in, str):
            amount_in = parse_units(amount_in, decimals_in)

        snapshot = self._resolve_reserves(reserves)
        stale = self._check_freshness(snapshot, strict)

        quote = amm.quote_swap(
            snapshot,
            token_in_is_a,
            amount_in,
            self.pair.decimals_a,
            self.pair.decimals_b,
            fee_bps=self.fee_bps,
            tolerance_bps=preference.tolerance_bps,
        )
        return replace(
            quote,
            token_in=self.pair.token_a if token_in_is_a else self.pair.token_b,
            stale=stale,
        )
