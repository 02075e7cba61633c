"""Provider-agnostic quote and swap aggregation.

SwapAggregator owns one provider per enabled selector and routes each call
to the right one. A quote remembers which provider produced it, so swapping
that quote always returns to the same provider.
"""

import asyncio
import logging
from typing import Mapping, Optional, Union

from solders.hash import Hash
from solders.pubkey import Pubkey

from solana_swap.chain import ChainContext
from solana_swap.config import SwapConfig, get_config
from solana_swap.errors import ProviderError, ProviderNotConfiguredError, SwapError
from solana_swap.normalize import into_unsigned_transaction
from solana_swap.providers.base import ResolvedQuoteRequest, SwapProvider
from solana_swap.providers.factory import create_providers
from solana_swap.routing import resolve_route_options
from solana_swap.types import Provider, QuoteRequest, QuoteResponse, SwapResult, UnsignedTransaction

logger = logging.getLogger(__name__)


class SwapAggregator:
    """Dispatches quotes and swaps across the enabled providers.

    Construction is synchronous and opens no connections. Providers that
    need a session open it on their first call.
    """

    def __init__(
        self,
        config: Optional[SwapConfig] = None,
        providers: Optional[Mapping[Provider, SwapProvider]] = None,
    ):
        """Initialize the aggregator.

        Args:
            config: Configuration (uses the cached environment config if not provided)
            providers: Explicit dispatch table; built from config.enabled_providers if not provided
        """
        self.config = config or get_config()
        self.default_slippage_bps = self.config.default_slippage_bps
        if providers is None:
            providers = create_providers(self.config)
        self._providers: dict[Provider, SwapProvider] = dict(providers)

    @property
    def enabled_providers(self) -> list[Provider]:
        """Enabled selectors, in declaration order."""
        return [p for p in Provider if p in self._providers]

    def is_enabled(self, provider: Provider) -> bool:
        return provider in self._providers

    def get_provider(self, provider: Provider) -> SwapProvider:
        """Get the provider for a selector.

        Raises:
            ProviderNotConfiguredError: selector is not enabled here
        """
        try:
            return self._providers[provider]
        except KeyError:
            raise ProviderNotConfiguredError(provider) from None

    def resolve_request(self, provider: SwapProvider, request: QuoteRequest) -> ResolvedQuoteRequest:
        """Apply the default slippage and the provider's routing rules."""
        slippage_bps = request.slippage_bps
        if slippage_bps is None:
            slippage_bps = self.default_slippage_bps
        return ResolvedQuoteRequest(
            input_mint=request.input_mint,
            output_mint=request.output_mint,
            amount=request.amount,
            slippage_bps=slippage_bps,
            route=resolve_route_options(request.only_direct_routes, provider.hop_limit),
        )

    async def quote(self, provider: Provider, request: QuoteRequest) -> QuoteResponse:
        """Get a quote from one provider.

        Args:
            provider: Provider to ask
            request: Quote request

        Returns:
            Quote tagged with the provider that must service the swap
        """
        impl = self.get_provider(provider)
        await impl.connect()

        resolved = self.resolve_request(impl, request)
        logger.debug(
            f"Requesting quote from {provider}: {request.amount} {request.input_mint} -> "
            f"{request.output_mint} (slippage: {resolved.slippage_bps} bps, "
            f"direct: {resolved.route.only_direct_routes}, max hops: {resolved.route.max_route_length})"
        )
        result = await impl.quote(resolved)

        logger.info(
            f"Quote from {provider}: {result.input_amount} -> {result.output_amount} "
            f"(slippage: {result.slippage_bps} bps)"
        )
        return QuoteResponse(
            provider=provider,
            input_mint=request.input_mint,
            output_mint=request.output_mint,
            input_amount=result.input_amount,
            output_amount=result.output_amount,
            slippage_bps=result.slippage_bps,
            price_impact_bps=result.price_impact_bps,
            provider_data=result.provider_data,
        )

    async def _quote_isolated(
        self, provider: Provider, request: QuoteRequest
    ) -> Union[QuoteResponse, SwapError]:
        try:
            return await self.quote(provider, request)
        except SwapError as e:
            logger.warning(f"{provider} quote failed: {type(e).__name__}: {e}")
            return e
        except Exception as e:
            logger.warning(f"{provider} quote failed: {type(e).__name__}: {e}")
            error = ProviderError(provider, "quote", f"{type(e).__name__}: {e}")
            error.__cause__ = e
            return error

    async def quote_all(self, request: QuoteRequest) -> dict[Provider, Union[QuoteResponse, SwapError]]:
        """Quote every enabled provider concurrently.

        One provider failing never affects the others: every outcome, success
        or error, is reported under its own provider.
        """
        providers = self.enabled_providers
        outcomes = await asyncio.gather(*(self._quote_isolated(p, request) for p in providers))
        results = dict(zip(providers, outcomes))

        succeeded = [p for p, r in results.items() if isinstance(r, QuoteResponse)]
        logger.info(
            f"Got {len(succeeded)}/{len(providers)} quote(s) for "
            f"{request.input_mint} -> {request.output_mint}"
        )
        return results

    async def swap(
        self,
        quote: QuoteResponse,
        user_public_key: Pubkey,
        chain: Optional[ChainContext] = None,
    ) -> SwapResult:
        """Turn a quote into a swap with the provider that produced it.

        Args:
            quote: Quote returned by quote() or quote_all()
            user_public_key: Wallet that will sign and pay
            chain: Chain access for providers that need on-chain data

        Raises:
            ProviderNotConfiguredError: quote came from a provider not enabled here
        """
        impl = self.get_provider(quote.provider)
        await impl.connect()

        logger.debug(f"Requesting swap from {quote.provider} for {user_public_key}")
        return await impl.swap(quote.provider_data, user_public_key, chain)

    async def build_transaction(
        self,
        quote: QuoteResponse,
        user_public_key: Pubkey,
        chain: Optional[ChainContext] = None,
        blockhash: Optional[Hash] = None,
        last_valid_block_height: Optional[int] = None,
    ) -> UnsignedTransaction:
        """Swap a quote and normalize the result into an unsigned transaction.

        When no blockhash is given and chain access is available, the latest
        blockhash and its expiry are fetched from the chain. A blockhash passed
        in should come with its own last_valid_block_height; without one the
        expiry is reported as unknown.
        """
        result = await self.swap(quote, user_public_key, chain)

        if blockhash is None and chain is not None:
            blockhash, last_valid_block_height = await chain.get_latest_blockhash()

        return await into_unsigned_transaction(
            result,
            user_public_key,
            blockhash,
            chain,
            last_valid_block_height=last_valid_block_height,
        )
