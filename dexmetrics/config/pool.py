"""
Pool-specific configuration for dexmetrics.
"""

from dataclasses import dataclass

from .base import BaseConfig, ConfigError


@dataclass
class PoolConfig(BaseConfig):
    """Configuration of the tracked AMM pool and its refresh cadence."""

    # Pool and token addresses
    POOL_ADDRESS: str = BaseConfig.get_env("POOL_ADDRESS", "")
    TOKEN_A_ADDRESS: str = BaseConfig.get_env("TOKEN_A_ADDRESS", "")
    TOKEN_B_ADDRESS: str = BaseConfig.get_env("TOKEN_B_ADDRESS", "")

    # Token display settings
    TOKEN_A_SYMBOL: str = BaseConfig.get_env("TOKEN_A_SYMBOL", "MTK")
    TOKEN_B_SYMBOL: str = BaseConfig.get_env("TOKEN_B_SYMBOL", "sUSDC")
    TOKEN_A_DECIMALS: int = BaseConfig.get_env_int("TOKEN_A_DECIMALS", 18)
    TOKEN_B_DECIMALS: int = BaseConfig.get_env_int("TOKEN_B_DECIMALS", 6)

    # Pricing
    FEE_BPS: int = BaseConfig.get_env_int("FEE_BPS", 30)  # 0.3%

    # Rolling window and refresh cadence
    WINDOW_HOURS: int = BaseConfig.get_env_int("WINDOW_HOURS", 24)
    HISTORY_BLOCKS: int = BaseConfig.get_env_int("HISTORY_BLOCKS", 10000)
    PRICE_HISTORY_POINTS: int = BaseConfig.get_env_int("PRICE_HISTORY_POINTS", 24)
    METRICS_REFRESH_SECONDS: float = BaseConfig.get_env_float("METRICS_REFRESH_SECONDS", 30.0)
    SUMMARY_REFRESH_SECONDS: float = BaseConfig.get_env_float("SUMMARY_REFRESH_SECONDS", 60.0)

    def __post_init__(self):
        super().__post_init__()
        self._validate_pool()

    def _validate_pool(self):
        """Validate pool settings."""
        if not 0 <= self.FEE_BPS < 10000:
            raise ConfigError(f"FEE_BPS must be in [0, 10000), got {self.FEE_BPS}")
        if self.TOKEN_A_DECIMALS < 0 or self.TOKEN_B_DECIMALS < 0:
            raise ConfigError("Token decimals must be non-negative")
        if self.WINDOW_HOURS <= 0:
            raise ConfigError(f"WINDOW_HOURS must be positive, got {self.WINDOW_HOURS}")
        if self.METRICS_REFRESH_SECONDS <= 0 or self.SUMMARY_REFRESH_SECONDS <= 0:
            raise ConfigError("Refresh intervals must be positive")

    def token_pair(self):
        """Build the TokenPair used by the quoter and aggregator."""
        from ..pricing.quoter import TokenPair

        return TokenPair(
            token_a=self.TOKEN_A_ADDRESS,
            token_b=self.TOKEN_B_ADDRESS,
            decimals_a=self.TOKEN_A_DECIMALS,
            decimals_b=self.TOKEN_B_DECIMALS,
            symbol_a=self.TOKEN_A_SYMBOL,
            symbol_b=self.TOKEN_B_SYMBOL,
        )
