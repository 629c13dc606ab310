"""
Chain-specific configuration for dexmetrics.
"""

from dataclasses import dataclass
from typing import Dict

from .base import BaseConfig


@dataclass
class ChainConfig(BaseConfig):
    """Chain-specific configuration for different blockchains."""

    # Default chain settings
    DEFAULT_CHAIN: str = BaseConfig.get_env("DEFAULT_CHAIN", "lisk_sepolia")

    # Chain-specific RPC URLs
    ETHEREUM_RPC_URL: str = BaseConfig.get_env("ETHEREUM_RPC_URL", "https://eth.llamarpc.com")
    BASE_RPC_URL: str = BaseConfig.get_env("BASE_RPC_URL", "https://mainnet.base.org")
    LISK_SEPOLIA_RPC_URL: str = BaseConfig.get_env(
        "LISK_SEPOLIA_RPC_URL", "https://rpc.sepolia-api.lisk.com"
    )
    LOCAL_RPC_URL: str = BaseConfig.get_env("LOCAL_RPC_URL", "http://127.0.0.1:8545")

    # Chain IDs
    ETHEREUM_CHAIN_ID: int = 1
    BASE_CHAIN_ID: int = 8453
    LISK_SEPOLIA_CHAIN_ID: int = 4202
    LOCAL_CHAIN_ID: int = 31337

    # Block settings
    BLOCKS_PER_MINUTE_ETHEREUM: int = 5  # ~12s block time
    BLOCKS_PER_MINUTE_BASE: int = 30  # ~2s block time
    BLOCKS_PER_MINUTE_LISK_SEPOLIA: int = 30  # ~2s block time
    BLOCKS_PER_MINUTE_LOCAL: int = BaseConfig.get_env_int("BLOCKS_PER_MINUTE_LOCAL", 30)

    # Retry settings for ledger reads
    MAX_RETRY_ATTEMPTS: int = BaseConfig.get_env_int("MAX_RETRY_ATTEMPTS", 3)
    RETRY_DELAY_SECONDS: float = BaseConfig.get_env_float("RETRY_DELAY_SECONDS", 1.0)
    REQUEST_TIMEOUT_SECONDS: float = BaseConfig.get_env_float("REQUEST_TIMEOUT_SECONDS", 30.0)

    @property
    def supported_chains(self) -> Dict[str, Dict]:
        """Get configuration for all supported chains."""
        return {
            "ethereum": {
                "chain_id": self.ETHEREUM_CHAIN_ID,
                "rpc_url": self.ETHEREUM_RPC_URL,
                "blocks_per_minute": self.BLOCKS_PER_MINUTE_ETHEREUM,
                "native_token": "ETH",
                "explorer_url": "https://etherscan.io",
            },
            "base": {
                "chain_id": self.BASE_CHAIN_ID,
                "rpc_url": self.BASE_RPC_URL,
                "blocks_per_minute": self.BLOCKS_PER_MINUTE_BASE,
                "native_token": "ETH",
                "explorer_url": "https://basescan.org",
            },
            "lisk_sepolia": {
                "chain_id": self.LISK_SEPOLIA_CHAIN_ID,
                "rpc_url": self.LISK_SEPOLIA_RPC_URL,
                "blocks_per_minute": self.BLOCKS_PER_MINUTE_LISK_SEPOLIA,
                "native_token": "ETH",
                "explorer_url": "https://sepolia-blockscout.lisk.com",
            },
            "local": {
                "chain_id": self.LOCAL_CHAIN_ID,
                "rpc_url": self.LOCAL_RPC_URL,
                "blocks_per_minute": self.BLOCKS_PER_MINUTE_LOCAL,
                "native_token": "ETH",
                "explorer_url": "",
            },
        }

    def get_chain_config(self, chain_name: str) -> Dict:
        """Get configuration for a specific chain."""
        if chain_name not in self.supported_chains:
            raise ValueError(f"Unsupported chain: {chain_name}")
        return self.supported_chains[chain_name]

    def get_rpc_url(self, chain_name: str) -> str:
        """Get RPC URL for a specific chain."""
        return self.get_chain_config(chain_name)["rpc_url"]

    def get_chain_id(self, chain_name: str) -> int:
        """Get chain ID for a specific chain."""
        return self.get_chain_config(chain_name)["chain_id"]

    def get_blocks_per_minute(self, chain_name: str) -> int:
        """Get blocks per minute for a specific chain."""
        return self.get_chain_config(chain_name)["blocks_per_minute"]

    def calculate_blocks_for_time_range(self, chain_name: str, minutes: int) -> int:
        """Calculate number of blocks for a given time range in minutes."""
        blocks_per_minute = self.get_blocks_per_minute(chain_name)
        return minutes * blocks_per_minute

    def get_window_blocks(self, chain_name: str, hours: int = 24) -> int:
        """Number of blocks approximating a rolling window of the given hours."""
        return self.calculate_blocks_for_time_range(chain_name, hours * 60)

    def get_explorer_tx_url(self, chain_name: str, tx_hash: str) -> str:
        """Block explorer link for a transaction, empty when the chain has no explorer."""
        explorer = self.get_chain_config(chain_name)["explorer_url"]
        return f"{explorer}/tx/{tx_hash}" if explorer else ""
