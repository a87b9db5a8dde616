"""Application configuration using pydantic-settings.

Gas tuning constants (flashloan multiplier, large transaction buffer, per-chain
gas limit multipliers) live here so they can be recalibrated from the
environment without a code change.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class GasTuning:
    """Empirically tuned constants used by the gas fee model."""

    flashloan_gas_multiplier: Decimal = Decimal("1.175")
    large_tx_gas_threshold: int = 3_000_000
    large_tx_buffer_numerator: int = 2
    large_tx_buffer_denominator: int = 64
    fee_safety_margin: Decimal = Decimal("1.2")
    min_fee_amount: int = 10**14
    default_gas_limit_multiplier: float = 1.05
    gas_limit_multipliers: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType(
            {"10": 1.15, "8453": 1.15, "204": 1.15}
        )
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")
    path_prefix: str = Field(default="", description="Route prefix for all sourcing endpoints")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")

    # ======================
    # Cache
    # ======================
    redis_url: str = Field(default="", description="Redis URL (empty = in-memory cache)")
    avocado_address_cache_expiry: int = Field(
        default=7 * 24 * 3600, description="Wallet address cache TTL in seconds"
    )
    avocado_required_signers_cache_expiry: int = Field(
        default=300, description="Required signers cache TTL in seconds"
    )
    avocado_nonce_cache_expiry: int = Field(
        default=30, description="Wallet nonce cache TTL in seconds"
    )

    # ======================
    # Chain RPC Endpoints
    # ======================
    eth_rpc_url: str = Field(default="https://rpc.ankr.com/eth", description="Ethereum RPC URL")
    polygon_rpc_url: str = Field(
        default="https://rpc.ankr.com/polygon", description="Polygon RPC URL"
    )
    arbitrum_rpc_url: str = Field(
        default="https://arb1.arbitrum.io/rpc", description="Arbitrum RPC URL"
    )
    avalanche_rpc_url: str = Field(
        default="https://rpc.ankr.com/avalanche", description="Avalanche C-Chain RPC URL"
    )
    optimism_rpc_url: str = Field(
        default="https://rpc.ankr.com/optimism", description="Optimism RPC URL"
    )

    # ======================
    # Timeouts
    # ======================
    rpc_timeout_seconds: float = Field(default=10.0, description="Timeout per RPC request")
    price_timeout_seconds: float = Field(default=10.0, description="Timeout per price request")
    chain_timeout_seconds: float = Field(
        default=25.0, description="Timeout for one chain's balance or fee computation"
    )

    # ======================
    # Contracts & price feed
    # ======================
    avo_forwarder_address: str = Field(
        default="0x46978CD477A496028A18c02F07ab7F35EDBa5A54",
        description="AvoForwarder contract address (same on every chain)",
    )
    address_resolver_chain_id: int = Field(
        default=137, description="Chain used to compute counterfactual wallet addresses"
    )
    price_api_url: str = Field(
        default="https://prices.instadapp.io",
        description="Native token price API base URL",
    )

    # ======================
    # Gas tuning
    # ======================
    flashloan_gas_multiplier: Decimal = Field(
        default=Decimal("1.175"), description="Gas limit multiplier for flashloan batches"
    )
    large_tx_gas_threshold: int = Field(
        default=3_000_000, description="Gas limit above which the 2/64 buffer is added"
    )
    fee_safety_margin: Decimal = Field(
        default=Decimal("1.2"), description="Safety margin applied to the final fee"
    )
    min_fee_amount: int = Field(
        default=10**14, description="Minimum fee (fiat amount scaled by 1e18)"
    )
    default_gas_limit_multiplier: float = Field(
        default=1.05, description="Gas limit multiplier for chains missing from the table"
    )
    gas_limit_multipliers: dict[str, float] = Field(
        default_factory=lambda: {"10": 1.15, "8453": 1.15, "204": 1.15},
        description="Per-chain gas limit multipliers (JSON object keyed by chain id)",
    )

    # ======================
    # Routing
    # ======================
    max_route_candidates: int = Field(
        default=12, description="Candidate chain count above which enumeration is logged as risky"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def get_rpc_url(self, chain_id: int) -> str:
        """Get RPC URL for a chain id."""
        rpc_map = {
            1: self.eth_rpc_url,
            137: self.polygon_rpc_url,
            42161: self.arbitrum_rpc_url,
            43114: self.avalanche_rpc_url,
            10: self.optimism_rpc_url,
        }
        return rpc_map.get(int(chain_id), "")

    def gas_tuning(self) -> GasTuning:
        """Build the immutable gas tuning table from the current settings."""
        return GasTuning(
            flashloan_gas_multiplier=self.flashloan_gas_multiplier,
            large_tx_gas_threshold=self.large_tx_gas_threshold,
            fee_safety_margin=self.fee_safety_margin,
            min_fee_amount=self.min_fee_amount,
            default_gas_limit_multiplier=self.default_gas_limit_multiplier,
            gas_limit_multipliers=MappingProxyType(
                {str(k): float(v) for k, v in self.gas_limit_multipliers.items()}
            ),
        )

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "path_prefix": self.path_prefix or "(none)",
            "cache": {
                "backend": "redis" if self.redis_url else "memory",
                "url": self._redact_url(self.redis_url) if self.redis_url else "(not set)",
                "address_ttl": self.avocado_address_cache_expiry,
                "signers_ttl": self.avocado_required_signers_cache_expiry,
                "nonce_ttl": self.avocado_nonce_cache_expiry,
            },
            "chains": {
                "1": {"rpc": self.eth_rpc_url},
                "137": {"rpc": self.polygon_rpc_url},
                "42161": {"rpc": self.arbitrum_rpc_url},
                "43114": {"rpc": self.avalanche_rpc_url},
                "10": {"rpc": self.optimism_rpc_url},
            },
            "gas": {
                "flashloan_multiplier": str(self.flashloan_gas_multiplier),
                "large_tx_threshold": self.large_tx_gas_threshold,
                "fee_safety_margin": str(self.fee_safety_margin),
                "gas_limit_multipliers": self.gas_limit_multipliers,
            },
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact the password part of a connection URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
