"""Provider-agnostic Solana swap quotes and unsigned transactions.

Providers: Jupiter, Titan, DFlow.
"""

from solana_swap.aggregator import SwapAggregator
from solana_swap.chain import ChainContext, RpcChainContext
from solana_swap.config import SwapConfig, get_config
from solana_swap.errors import (
    ConfigurationError,
    NoRouteFoundError,
    NormalizationError,
    ProviderConnectionError,
    ProviderError,
    ProviderNotConfiguredError,
    SwapError,
)
from solana_swap.normalize import into_unsigned_transaction
from solana_swap.routing import RouteOptions, resolve_route_options
from solana_swap.types import (
    InstructionsResult,
    Provider,
    QuoteRequest,
    QuoteResponse,
    SwapResult,
    TransactionResult,
    UnsignedTransaction,
)

__version__ = "0.1.0"

__all__ = [
    "SwapAggregator",
    "SwapConfig",
    "get_config",
    # Types
    "Provider",
    "QuoteRequest",
    "QuoteResponse",
    "SwapResult",
    "InstructionsResult",
    "TransactionResult",
    "UnsignedTransaction",
    "RouteOptions",
    "resolve_route_options",
    "into_unsigned_transaction",
    # Chain access
    "ChainContext",
    "RpcChainContext",
    # Errors
    "SwapError",
    "ConfigurationError",
    "ProviderNotConfiguredError",
    "ProviderConnectionError",
    "ProviderError",
    "NoRouteFoundError",
    "NormalizationError",
]
