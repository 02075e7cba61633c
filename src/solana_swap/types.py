"""Request, response and result types shared by every provider."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction


class Provider(str, Enum):
    """Liquidity providers the aggregator can dispatch to."""

    JUPITER = "jupiter"
    TITAN = "titan"
    DFLOW = "dflow"

    @property
    def display_name(self) -> str:
        return {
            Provider.JUPITER: "Jupiter",
            Provider.TITAN: "Titan",
            Provider.DFLOW: "Dflow",
        }[self]

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True)
class QuoteRequest:
    """A request for a swap quote.

    Attributes:
        input_mint: Mint of the token being sold
        output_mint: Mint of the token being bought
        amount: Input amount in the token's smallest unit
        slippage_bps: Slippage tolerance; None falls back to the aggregator default
        only_direct_routes: True/False restricts routing, None lets the provider decide
    """

    input_mint: Pubkey
    output_mint: Pubkey
    amount: int
    slippage_bps: Optional[int] = None
    only_direct_routes: Optional[bool] = None


@dataclass(frozen=True)
class ProviderQuote:
    """Quote figures and continuation payload as produced by one provider."""

    input_amount: int
    output_amount: int
    slippage_bps: int
    price_impact_bps: Optional[int] = None
    provider_data: dict[str, Any] = field(default_factory=dict)


@dataclass
class QuoteResponse:
    """A normalized quote, tagged with the provider that must service the swap.

    provider_data is private to the producing provider. The aggregator passes
    it back unchanged when the quote is swapped.
    """

    provider: Provider
    input_mint: Pubkey
    output_mint: Pubkey
    input_amount: int
    output_amount: int
    slippage_bps: int
    price_impact_bps: Optional[int] = None
    provider_data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InstructionsResult:
    """Swap returned as raw instructions that still need compiling."""

    instructions: list[Instruction]
    address_lookup_table_addresses: list[Pubkey] = field(default_factory=list)
    compute_units: Optional[int] = None


@dataclass(frozen=True)
class TransactionResult:
    """Swap returned as a provider-assembled transaction.

    transaction is either a decoded VersionedTransaction or the base64 wire
    encoding the provider returned.
    """

    transaction: Union[VersionedTransaction, str]
    last_valid_block_height: int = 0


SwapResult = Union[InstructionsResult, TransactionResult]


@dataclass(frozen=True)
class UnsignedTransaction:
    """A transaction ready for signing, with placeholder signatures."""

    transaction: VersionedTransaction
    last_valid_block_height: Optional[int] = None
    compute_units: Optional[int] = None

    @property
    def num_required_signatures(self) -> int:
        return self.transaction.message.header.num_required_signatures
