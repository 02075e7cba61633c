"""Command-line quotes across providers.

Usage:
    solana-swap quote --input-mint So111... --output-mint EPjF... --amount 1000000
    solana-swap quote ... --provider dflow --slippage-bps 100 --only-direct-routes
    solana-swap config
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from solders.pubkey import Pubkey

from solana_swap.aggregator import SwapAggregator
from solana_swap.config import get_config
from solana_swap.errors import SwapError
from solana_swap.types import Provider, QuoteRequest, QuoteResponse

logger = logging.getLogger(__name__)


def _pubkey(value: str) -> Pubkey:
    try:
        return Pubkey.from_string(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a valid address: {value}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="solana-swap", description="Solana swap quote aggregator")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    quote = commands.add_parser("quote", help="Request quotes")
    quote.add_argument("--input-mint", type=_pubkey, required=True)
    quote.add_argument("--output-mint", type=_pubkey, required=True)
    quote.add_argument("--amount", type=int, required=True, help="Input amount in smallest units")
    quote.add_argument("--slippage-bps", type=int, default=None)
    quote.add_argument(
        "--provider",
        choices=[p.value for p in Provider] + ["all"],
        default="all",
        help="Provider to ask (default: all enabled)",
    )
    routes = quote.add_mutually_exclusive_group()
    routes.add_argument("--only-direct-routes", dest="only_direct_routes", action="store_const", const=True)
    routes.add_argument("--allow-multi-hop", dest="only_direct_routes", action="store_const", const=False)

    commands.add_parser("config", help="Show resolved configuration (secrets redacted)")
    return parser


def format_quote(quote: QuoteResponse) -> str:
    impact = f" · impact: {quote.price_impact_bps} bps" if quote.price_impact_bps is not None else ""
    return (
        f"[{quote.provider}] {quote.input_amount} -> {quote.output_amount} "
        f"· slippage: {quote.slippage_bps} bps{impact}"
    )


async def run_quote(args: argparse.Namespace) -> int:
    aggregator = SwapAggregator(get_config())
    request = QuoteRequest(
        input_mint=args.input_mint,
        output_mint=args.output_mint,
        amount=args.amount,
        slippage_bps=args.slippage_bps,
        only_direct_routes=args.only_direct_routes,
    )

    if args.provider == "all":
        results = await aggregator.quote_all(request)
    else:
        provider = Provider(args.provider)
        try:
            results = {provider: await aggregator.quote(provider, request)}
        except SwapError as e:
            logger.warning(f"{provider} quote failed: {type(e).__name__}: {e}")
            results = {provider: e}

    failures = 0
    for provider, result in results.items():
        if isinstance(result, QuoteResponse):
            print(format_quote(result))
        else:
            failures += 1
            print(f"[{provider}] error: {result}")

    return 1 if failures == len(results) else 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "config":
        print(json.dumps(get_config().get_safe_dict(), indent=2))
        return 0

    return asyncio.run(run_quote(args))


if __name__ == "__main__":
    sys.exit(main())
