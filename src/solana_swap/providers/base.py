"""Abstract provider interface.

Each provider implements two calls it fully controls: quote, which returns
figures plus a private continuation payload, and swap, which receives that
payload back and returns a SwapResult.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from solders.pubkey import Pubkey

from solana_swap.chain import ChainContext
from solana_swap.routing import RouteOptions
from solana_swap.types import Provider, ProviderQuote, SwapResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedQuoteRequest:
    """A quote request with slippage and routing options already resolved."""

    input_mint: Pubkey
    output_mint: Pubkey
    amount: int
    slippage_bps: int
    route: RouteOptions = RouteOptions()


class SwapProvider(ABC):
    """Abstract base class for swap providers."""

    # Configured hop cap; providers without one leave it None
    hop_limit: Optional[int] = None

    @property
    @abstractmethod
    def provider(self) -> Provider:
        """Selector identifying this provider."""
        pass

    async def connect(self) -> None:
        """Ensure any persistent session exists. Stateless providers do nothing."""
        return None

    @abstractmethod
    async def quote(self, request: ResolvedQuoteRequest) -> ProviderQuote:
        """
        Get a swap quote.

        Args:
            request: Request with slippage and route options resolved

        Returns:
            Quote figures plus the payload swap() will receive back
        """
        pass

    @abstractmethod
    async def swap(
        self,
        provider_data: dict[str, Any],
        user_public_key: Pubkey,
        chain: Optional[ChainContext] = None,
    ) -> SwapResult:
        """
        Turn a previous quote into an executable swap.

        Args:
            provider_data: Payload this provider produced during quote
            user_public_key: Wallet that will sign and pay
            chain: Chain access, for providers that need on-chain data

        Returns:
            InstructionsResult or TransactionResult, fixed per provider
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider={self.provider.value})"
