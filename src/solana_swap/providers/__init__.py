"""Swap providers.

Providers:
- Jupiter: REST aggregator, returns raw swap instructions
- Titan: WebSocket aggregator, returns raw swap instructions
- DFlow: REST order API, returns a ready unsigned transaction
"""

from solana_swap.providers.base import ResolvedQuoteRequest, SwapProvider
from solana_swap.providers.dflow import DflowProvider
from solana_swap.providers.factory import create_provider, create_providers
from solana_swap.providers.jupiter import JupiterProvider
from solana_swap.providers.titan import TitanProvider

__all__ = [
    # Base classes
    "ResolvedQuoteRequest",
    "SwapProvider",
    # Providers
    "DflowProvider",
    "JupiterProvider",
    "TitanProvider",
    # Factory functions
    "create_provider",
    "create_providers",
]
