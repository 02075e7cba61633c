"""Jupiter swap aggregator integration.

Quotes come from GET /quote; swaps come back as raw instructions from
POST /swap-instructions so the caller can compile their own transaction.
API docs: https://dev.jup.ag/docs/swap-api
"""

import logging
from typing import Any, Optional

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from solana_swap.chain import ChainContext
from solana_swap.config import DEFAULT_JUPITER_API_URL
from solana_swap.errors import ProviderError
from solana_swap.providers.base import ResolvedQuoteRequest
from solana_swap.providers.common import (
    build_instruction,
    expect_list,
    parse_amount,
    parse_optional_amount,
    parse_pubkey,
    price_impact_bps,
)
from solana_swap.providers.http import HttpSwapProvider
from solana_swap.types import InstructionsResult, Provider, ProviderQuote

logger = logging.getLogger(__name__)


class JupiterProvider(HttpSwapProvider):
    """Jupiter provider for Solana.

    The continuation payload is Jupiter's own quote response, which the swap
    endpoint accepts back verbatim. It already encodes every routing choice
    made at quote time.
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None, **kwargs: Any):
        super().__init__(base_url or DEFAULT_JUPITER_API_URL, api_key=api_key, **kwargs)

    @property
    def provider(self) -> Provider:
        return Provider.JUPITER

    def quote_params(self, request: ResolvedQuoteRequest) -> dict[str, str]:
        params = {
            "inputMint": str(request.input_mint),
            "outputMint": str(request.output_mint),
            "amount": str(request.amount),
            "slippageBps": str(request.slippage_bps),
        }
        if request.route.only_direct_routes is not None:
            params["onlyDirectRoutes"] = "true" if request.route.only_direct_routes else "false"
        return params

    async def quote(self, request: ResolvedQuoteRequest) -> ProviderQuote:
        data = await self._request("quote", "GET", "/quote", params=self.quote_params(request))

        for key in ("inAmount", "outAmount"):
            if key not in data:
                raise ProviderError(self.provider, "quote", f"quote response missing {key}")

        return ProviderQuote(
            input_amount=parse_amount(data["inAmount"], "inAmount", self.provider, "quote"),
            output_amount=parse_amount(data["outAmount"], "outAmount", self.provider, "quote"),
            slippage_bps=parse_amount(
                data.get("slippageBps", request.slippage_bps), "slippageBps", self.provider, "quote"
            ),
            price_impact_bps=price_impact_bps(data.get("priceImpactPct")),
            provider_data=data,
        )

    async def swap(
        self,
        provider_data: dict[str, Any],
        user_public_key: Pubkey,
        chain: Optional[ChainContext] = None,
    ) -> InstructionsResult:
        if not provider_data:
            raise ProviderError(self.provider, "swap", "missing quote response in provider data")

        data = await self._request(
            "swap",
            "POST",
            "/swap-instructions",
            json={
                "userPublicKey": str(user_public_key),
                "quoteResponse": provider_data,
                "dynamicComputeUnitLimit": True,
            },
        )

        if not data.get("swapInstruction"):
            raise ProviderError(self.provider, "swap", "response missing swapInstruction")

        compute_units = parse_optional_amount(
            data.get("computeUnitLimit"), "computeUnitLimit", self.provider, "swap"
        )
        return InstructionsResult(
            instructions=self._collect_instructions(data),
            address_lookup_table_addresses=[
                parse_pubkey(address, self.provider, "swap")
                for address in expect_list(
                    data.get("addressLookupTableAddresses"),
                    "addressLookupTableAddresses",
                    self.provider,
                    "swap",
                )
            ],
            compute_units=compute_units,
        )

    def _collect_instructions(self, data: dict) -> list[Instruction]:
        """Flatten the response into execution order."""

        def many(key: str) -> list:
            return expect_list(data.get(key), key, self.provider, "swap")

        ordered: list[dict] = []
        if data.get("tokenLedgerInstruction"):
            ordered.append(data["tokenLedgerInstruction"])
        ordered.extend(many("computeBudgetInstructions"))
        ordered.extend(many("setupInstructions"))
        ordered.append(data["swapInstruction"])
        if data.get("cleanupInstruction"):
            ordered.append(data["cleanupInstruction"])
        ordered.extend(many("otherInstructions"))

        return [build_instruction(ix, self.provider, "swap") for ix in ordered]
