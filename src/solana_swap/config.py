"""Aggregator configuration using pydantic-settings.

Every field resolves with the same precedence: a value passed explicitly to
SwapConfig(...) wins, then the matching environment variable (or .env
entry), then the compiled default below.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from solana_swap.errors import ConfigurationError
from solana_swap.types import Provider

DEFAULT_JUPITER_API_URL = "https://lite-api.jup.ag/swap/v1"
DEFAULT_TITAN_WS_URL = "wss://api.titan.ag/api/v1/ws"
DEFAULT_DFLOW_API_URL = "https://quote-api.dflow.net"
DEFAULT_SOLANA_RPC_URL = "https://api.mainnet-beta.solana.com"


class SwapConfig(BaseSettings):
    """Connection parameters for every provider, immutable once built."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ======================
    # Aggregator
    # ======================
    default_slippage_bps: int = Field(
        default=50, ge=0, le=10_000, description="Slippage used when a request sets none"
    )
    enabled_providers: str = Field(
        default="jupiter,titan,dflow",
        description="Comma-separated list of providers this aggregator may dispatch to",
    )
    request_timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")

    # ======================
    # Jupiter
    # ======================
    jupiter_api_url: str = Field(default=DEFAULT_JUPITER_API_URL, description="Jupiter swap API base URL")
    jupiter_api_key: Optional[str] = Field(default=None, description="Jupiter API key")

    # ======================
    # Titan
    # ======================
    titan_ws_url: str = Field(default=DEFAULT_TITAN_WS_URL, description="Titan WebSocket URL")
    titan_token: Optional[str] = Field(default=None, description="Titan bearer token")

    # ======================
    # DFlow
    # ======================
    dflow_api_url: str = Field(default=DEFAULT_DFLOW_API_URL, description="DFlow quote API base URL")
    dflow_api_key: Optional[str] = Field(default=None, description="DFlow API key")
    dflow_max_route_length: Optional[int] = Field(
        default=None, ge=1, description="Maximum number of hops DFlow may route through"
    )

    # ======================
    # Chain
    # ======================
    solana_rpc_url: str = Field(default=DEFAULT_SOLANA_RPC_URL, description="Solana RPC URL")

    @property
    def providers(self) -> frozenset[Provider]:
        """Parse enabled_providers into provider selectors."""
        selected = set()
        for name in self.enabled_providers.split(","):
            name = name.strip().lower()
            if not name:
                continue
            try:
                selected.add(Provider(name))
            except ValueError:
                valid = ", ".join(p.value for p in Provider)
                raise ConfigurationError(
                    f"unknown provider '{name}' in enabled_providers (expected one of: {valid})"
                ) from None
        return frozenset(selected)

    def get_safe_dict(self) -> dict:
        """Return settings dict with credentials redacted."""
        return {
            "default_slippage_bps": self.default_slippage_bps,
            "enabled_providers": sorted(p.value for p in self.providers),
            "request_timeout": self.request_timeout,
            "jupiter": {
                "url": self.jupiter_api_url,
                "api_key": "***" if self.jupiter_api_key else "(not set)",
            },
            "titan": {
                "url": self.titan_ws_url,
                "token": "***" if self.titan_token else "(not set)",
            },
            "dflow": {
                "url": self.dflow_api_url,
                "api_key": "***" if self.dflow_api_key else "(not set)",
                "max_route_length": self.dflow_max_route_length,
            },
            "solana_rpc_url": self.solana_rpc_url,
        }


@lru_cache
def get_config() -> SwapConfig:
    """Get cached configuration instance."""
    return SwapConfig()
