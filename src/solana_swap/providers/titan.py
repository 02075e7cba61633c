"""Titan integration over a persistent WebSocket session.

The session is opened on first use rather than at construction, and every
later quote or swap reuses it. A session that dies is not reopened; its
failure surfaces as a ProviderError on the next call.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional

from solders.pubkey import Pubkey
from websockets.exceptions import WebSocketException

from solana_swap.chain import ChainContext
from solana_swap.config import DEFAULT_TITAN_WS_URL
from solana_swap.errors import NoRouteFoundError, ProviderConnectionError, ProviderError
from solana_swap.providers.base import ResolvedQuoteRequest, SwapProvider
from solana_swap.providers.common import (
    build_instruction,
    expect_list,
    expect_object,
    parse_amount,
    parse_optional_amount,
    parse_pubkey,
)
from solana_swap.providers.titan_session import TitanSession, TitanSessionError
from solana_swap.types import InstructionsResult, Provider, ProviderQuote
from solana_swap.utils.lazy import LazyConnection

logger = logging.getLogger(__name__)


def _out_amount(route: dict) -> int:
    try:
        return int(route.get("outAmount", 0))
    except (TypeError, ValueError):
        return -1


def select_best_route(routes: Iterable[dict]) -> Optional[dict]:
    """Pick the route with the greatest output amount."""
    best: Optional[dict] = None
    for route in routes:
        if best is None or _out_amount(route) > _out_amount(best):
            best = route
    return best


class TitanProvider(SwapProvider):
    """Titan provider for Solana.

    Quote uses a one-shot price request; swap opens a quote stream with the
    wallet attached, so the quote stores the resolved request parameters.
    """

    def __init__(
        self,
        ws_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 30.0,
        connector: Optional[Callable[[], Awaitable[TitanSession]]] = None,
    ):
        """Initialize Titan provider.

        Args:
            ws_url: WebSocket URL (defaults to the public endpoint)
            token: Optional bearer token
            timeout: Handshake and per-request timeout in seconds
            connector: Custom session factory (used by tests)
        """
        self.ws_url = ws_url or DEFAULT_TITAN_WS_URL
        self.token = token
        self.timeout = timeout
        self._connector = connector or self._open_session
        self._session: LazyConnection[TitanSession] = LazyConnection(
            self._establish, name="Titan session"
        )

    @property
    def provider(self) -> Provider:
        return Provider.TITAN

    @property
    def connection_attempts(self) -> int:
        return self._session.attempts

    async def _open_session(self) -> TitanSession:
        return await TitanSession.connect(self.ws_url, self.token, open_timeout=self.timeout)

    async def _establish(self) -> TitanSession:
        try:
            return await self._connector()
        except ProviderConnectionError:
            raise
        except (OSError, WebSocketException, asyncio.TimeoutError, TitanSessionError) as e:
            raise ProviderConnectionError(self.provider, f"{type(e).__name__}: {e}") from e

    async def connect(self) -> None:
        await self._session.get()

    async def _call(self, phase: str, awaitable: Awaitable[Any]) -> Any:
        """Await a session call, mapping session failures to provider errors."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise ProviderError(self.provider, phase, f"timed out after {self.timeout}s") from None
        except TitanSessionError as e:
            message = str(e)
            if e.code == 404 or "No route" in message:
                raise NoRouteFoundError(self.provider, phase) from e
            raise ProviderError(self.provider, phase, message) from e

    async def quote(self, request: ResolvedQuoteRequest) -> ProviderQuote:
        session = await self._session.get()

        logger.debug("Titan GetSwapPrice")
        response = await self._call(
            "quote",
            session.request(
                "GetSwapPrice",
                {
                    "inputMint": str(request.input_mint),
                    "outputMint": str(request.output_mint),
                    "amount": request.amount,
                },
            ),
        )
        data = expect_object(response.get("data") or {}, "price response", self.provider, "quote")
        price = expect_object(data.get("SwapPrice") or data, "SwapPrice", self.provider, "quote")

        for key in ("amountIn", "amountOut"):
            if key not in price:
                raise ProviderError(self.provider, "quote", f"price response missing {key}")

        return ProviderQuote(
            input_amount=parse_amount(price["amountIn"], "amountIn", self.provider, "quote"),
            output_amount=parse_amount(price["amountOut"], "amountOut", self.provider, "quote"),
            slippage_bps=request.slippage_bps,
            price_impact_bps=None,
            provider_data={
                "inputMint": str(request.input_mint),
                "outputMint": str(request.output_mint),
                "amount": request.amount,
                "slippageBps": request.slippage_bps,
                "onlyDirectRoutes": request.route.only_direct_routes,
            },
        )

    def swap_params(self, provider_data: dict[str, Any], user_public_key: Pubkey) -> dict:
        expect_object(provider_data, "provider data", self.provider, "swap")
        try:
            swap = {
                "inputMint": str(parse_pubkey(provider_data["inputMint"], self.provider, "swap")),
                "outputMint": str(parse_pubkey(provider_data["outputMint"], self.provider, "swap")),
                "amount": parse_amount(provider_data["amount"], "amount", self.provider, "swap"),
                "swapMode": "ExactIn",
            }
        except KeyError as e:
            raise ProviderError(self.provider, "swap", f"missing {e.args[0]} in provider data") from None

        if provider_data.get("slippageBps") is not None:
            swap["slippageBps"] = parse_amount(
                provider_data["slippageBps"], "slippageBps", self.provider, "swap"
            )
        if provider_data.get("onlyDirectRoutes") is not None:
            swap["onlyDirectRoutes"] = bool(provider_data["onlyDirectRoutes"])

        return {"swap": swap, "transaction": {"userPublicKey": str(user_public_key)}}

    async def swap(
        self,
        provider_data: dict[str, Any],
        user_public_key: Pubkey,
        chain: Optional[ChainContext] = None,
    ) -> InstructionsResult:
        params = self.swap_params(provider_data, user_public_key)
        session = await self._session.get()

        logger.debug("Titan NewSwapQuoteStream")
        stream = await self._call("swap", session.open_stream("NewSwapQuoteStream", params))
        try:
            payload = await self._call("swap", stream.recv())
        finally:
            try:
                await self._call("swap", stream.stop())
            except ProviderError as e:
                logger.warning(f"Failed to stop Titan stream {stream.stream_id}: {e}")

        if payload is None:
            raise NoRouteFoundError(self.provider, "swap")

        payload = expect_object(payload, "stream payload", self.provider, "swap")
        swap_quotes = expect_object(
            payload.get("SwapQuotes") or payload, "SwapQuotes", self.provider, "swap"
        )
        quotes = expect_object(swap_quotes.get("quotes") or {}, "quotes", self.provider, "swap")
        route = select_best_route(
            expect_object(route, f"route {name}", self.provider, "swap")
            for name, route in quotes.items()
        )
        if route is None:
            raise NoRouteFoundError(self.provider, "swap")

        instructions = [
            build_instruction(
                ix,
                self.provider,
                "swap",
                program_key="p",
                accounts_key="a",
                data_key="d",
                pubkey_key="p",
                signer_key="s",
                writable_key="w",
            )
            for ix in expect_list(route.get("instructions"), "instructions", self.provider, "swap")
        ]
        if not instructions:
            raise ProviderError(self.provider, "swap", "selected route has no instructions")

        return InstructionsResult(
            instructions=instructions,
            address_lookup_table_addresses=[
                parse_pubkey(address, self.provider, "swap")
                for address in expect_list(
                    route.get("addressLookupTables"), "addressLookupTables", self.provider, "swap"
                )
            ],
            compute_units=parse_optional_amount(
                route.get("computeUnits"), "computeUnits", self.provider, "swap"
            ),
        )
