"""DFlow integration.

DFlow serves both phases from GET /order: without a user key it returns a
quote, with one it also returns a ready, unsigned transaction.
"""

import logging
from typing import Any, Optional

from solders.pubkey import Pubkey

from solana_swap.chain import ChainContext
from solana_swap.config import DEFAULT_DFLOW_API_URL
from solana_swap.errors import ProviderError
from solana_swap.providers.base import ResolvedQuoteRequest
from solana_swap.providers.common import (
    expect_object,
    parse_amount,
    parse_optional_amount,
    parse_pubkey,
    price_impact_bps,
)
from solana_swap.providers.http import HttpSwapProvider
from solana_swap.routing import RouteOptions
from solana_swap.types import Provider, ProviderQuote, TransactionResult

logger = logging.getLogger(__name__)


class DflowProvider(HttpSwapProvider):
    """DFlow provider for Solana.

    The swap phase is a second, independent /order call, so the quote stores
    everything needed to repeat the request, including the resolved
    direct-route flag.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        max_route_length: Optional[int] = None,
        **kwargs: Any,
    ):
        """Initialize DFlow provider.

        Args:
            base_url: API base URL (defaults to the public quote API)
            api_key: Optional API key
            max_route_length: Maximum hops per route; None leaves it to DFlow
        """
        super().__init__(base_url or DEFAULT_DFLOW_API_URL, api_key=api_key, **kwargs)
        self.hop_limit = max_route_length

    @property
    def provider(self) -> Provider:
        return Provider.DFLOW

    @property
    def max_route_length(self) -> Optional[int]:
        return self.hop_limit

    def order_params(
        self,
        request: ResolvedQuoteRequest,
        user_public_key: Optional[Pubkey] = None,
    ) -> dict[str, str]:
        params = {
            "inputMint": str(request.input_mint),
            "outputMint": str(request.output_mint),
            "amount": str(request.amount),
            "slippageBps": str(request.slippage_bps),
        }
        if user_public_key is not None:
            params["userPublicKey"] = str(user_public_key)
        if request.route.max_route_length is not None:
            params["maxRouteLength"] = str(request.route.max_route_length)
        if request.route.only_direct_routes is not None:
            params["onlyDirectRoutes"] = "true" if request.route.only_direct_routes else "false"
        return params

    async def fetch_order(
        self,
        request: ResolvedQuoteRequest,
        phase: str,
        user_public_key: Optional[Pubkey] = None,
    ) -> dict:
        return await self._request(
            phase, "GET", "/order", params=self.order_params(request, user_public_key)
        )

    async def quote(self, request: ResolvedQuoteRequest) -> ProviderQuote:
        data = await self.fetch_order(request, "quote")

        for key in ("inAmount", "outAmount"):
            if key not in data:
                raise ProviderError(self.provider, "quote", f"order response missing {key}")

        return ProviderQuote(
            input_amount=parse_amount(data["inAmount"], "inAmount", self.provider, "quote"),
            output_amount=parse_amount(data["outAmount"], "outAmount", self.provider, "quote"),
            slippage_bps=parse_amount(
                data.get("slippageBps", request.slippage_bps), "slippageBps", self.provider, "quote"
            ),
            price_impact_bps=price_impact_bps(data.get("priceImpactPct")),
            provider_data={
                "inputMint": str(request.input_mint),
                "outputMint": str(request.output_mint),
                "amount": request.amount,
                "slippageBps": request.slippage_bps,
                "onlyDirectRoutes": request.route.only_direct_routes,
            },
        )

    def request_from_payload(self, provider_data: dict[str, Any]) -> ResolvedQuoteRequest:
        """Rebuild the quote-time request from the continuation payload."""
        expect_object(provider_data, "provider data", self.provider, "swap")
        try:
            input_mint = provider_data["inputMint"]
            output_mint = provider_data["outputMint"]
            amount = provider_data["amount"]
            slippage_bps = provider_data["slippageBps"]
        except KeyError as e:
            raise ProviderError(self.provider, "swap", f"missing {e.args[0]} in provider data") from None

        return ResolvedQuoteRequest(
            input_mint=parse_pubkey(input_mint, self.provider, "swap"),
            output_mint=parse_pubkey(output_mint, self.provider, "swap"),
            amount=parse_amount(amount, "amount", self.provider, "swap"),
            slippage_bps=parse_amount(slippage_bps, "slippageBps", self.provider, "swap"),
            route=RouteOptions(
                only_direct_routes=provider_data.get("onlyDirectRoutes"),
                max_route_length=self.hop_limit,
            ),
        )

    async def swap(
        self,
        provider_data: dict[str, Any],
        user_public_key: Pubkey,
        chain: Optional[ChainContext] = None,
    ) -> TransactionResult:
        request = self.request_from_payload(provider_data)
        data = await self.fetch_order(request, "swap", user_public_key)

        transaction = data.get("transaction")
        if not transaction:
            raise ProviderError(self.provider, "swap", "no transaction in order response")
        if not isinstance(transaction, str):
            raise ProviderError(self.provider, "swap", "transaction is not a base64 string")

        expiry = parse_optional_amount(
            data.get("lastValidBlockHeight"), "lastValidBlockHeight", self.provider, "swap"
        )
        return TransactionResult(transaction=transaction, last_valid_block_height=expiry or 0)
