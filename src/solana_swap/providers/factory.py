"""Factory for creating swap providers from configuration.

Dispatch is a closed match over Provider: every member has exactly one
branch here, and nothing registers providers at runtime.
"""

import logging
from typing import Optional

from solana_swap.config import SwapConfig, get_config
from solana_swap.errors import ProviderNotConfiguredError
from solana_swap.providers.base import SwapProvider
from solana_swap.types import Provider

logger = logging.getLogger(__name__)


def create_jupiter_provider(config: SwapConfig) -> SwapProvider:
    """Create Jupiter provider."""
    from solana_swap.providers.jupiter import JupiterProvider

    return JupiterProvider(
        base_url=config.jupiter_api_url,
        api_key=config.jupiter_api_key,
        timeout=config.request_timeout,
    )


def create_titan_provider(config: SwapConfig) -> SwapProvider:
    """Create Titan provider. The WebSocket session opens on first use."""
    from solana_swap.providers.titan import TitanProvider

    return TitanProvider(
        ws_url=config.titan_ws_url,
        token=config.titan_token,
        timeout=config.request_timeout,
    )


def create_dflow_provider(config: SwapConfig) -> SwapProvider:
    """Create DFlow provider."""
    from solana_swap.providers.dflow import DflowProvider

    return DflowProvider(
        base_url=config.dflow_api_url,
        api_key=config.dflow_api_key,
        max_route_length=config.dflow_max_route_length,
        timeout=config.request_timeout,
    )


def create_provider(provider: Provider, config: Optional[SwapConfig] = None) -> SwapProvider:
    """Create the provider for a selector.

    Args:
        provider: Provider selector
        config: Configuration (uses the cached environment config if not provided)
    """
    config = config or get_config()

    if provider is Provider.JUPITER:
        return create_jupiter_provider(config)
    elif provider is Provider.TITAN:
        return create_titan_provider(config)
    elif provider is Provider.DFLOW:
        return create_dflow_provider(config)

    raise ProviderNotConfiguredError(provider)


def create_providers(config: Optional[SwapConfig] = None) -> dict[Provider, SwapProvider]:
    """Create every provider enabled in the configuration."""
    config = config or get_config()
    providers = {}
    for provider in sorted(config.providers, key=lambda p: list(Provider).index(p)):
        providers[provider] = create_provider(provider, config)
        logger.info(f"Added {provider} provider")
    return providers
