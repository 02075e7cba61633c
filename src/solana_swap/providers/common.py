"""Parsing helpers shared by provider wire clients."""

import base64
import binascii
from typing import Any, Mapping, Optional

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from solana_swap.errors import ProviderError
from solana_swap.types import Provider


def parse_pubkey(value: Any, provider: Provider, phase: str) -> Pubkey:
    """Parse a base58 address from a provider response."""
    try:
        return Pubkey.from_string(str(value))
    except ValueError as e:
        raise ProviderError(provider, phase, f"invalid address {value!r}: {e}") from e


def parse_amount(value: Any, field: str, provider: Provider, phase: str) -> int:
    """Parse an integer amount that providers send as a decimal string."""
    try:
        amount = int(value)
    except (TypeError, ValueError):
        raise ProviderError(provider, phase, f"{field} is not an integer: {value!r}") from None
    if amount < 0:
        raise ProviderError(provider, phase, f"{field} is negative: {amount}")
    return amount


def parse_optional_amount(value: Any, field: str, provider: Provider, phase: str) -> Optional[int]:
    """Parse an optional amount where absent or zero means "not given"."""
    if value is None or value == "":
        return None
    return parse_amount(value, field, provider, phase) or None


def expect_object(value: Any, field: str, provider: Provider, phase: str) -> dict:
    """Check that a response field holds a JSON object."""
    if not isinstance(value, dict):
        raise ProviderError(provider, phase, f"{field} is not an object: {type(value).__name__}")
    return value


def expect_list(value: Any, field: str, provider: Provider, phase: str) -> list:
    """Check that an optional response field holds a JSON array."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ProviderError(provider, phase, f"{field} is not an array: {type(value).__name__}")
    return value


def price_impact_bps(value: Any) -> Optional[int]:
    """Convert a percentage string (e.g. "0.12") to basis points, or None."""
    if value is None:
        return None
    try:
        return int(abs(float(value)) * 100)
    except (TypeError, ValueError):
        return None


def decode_data(value: str, provider: Provider, phase: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ProviderError(provider, phase, f"instruction data is not valid base64: {e}") from e


def build_instruction(
    payload: Mapping[str, Any],
    provider: Provider,
    phase: str,
    program_key: str = "programId",
    accounts_key: str = "accounts",
    data_key: str = "data",
    pubkey_key: str = "pubkey",
    signer_key: str = "isSigner",
    writable_key: str = "isWritable",
) -> Instruction:
    """Build a solders Instruction from a provider's JSON instruction.

    Key names default to Jupiter's camelCase schema and can be overridden for
    providers with terser field names.
    """
    try:
        program_id = parse_pubkey(payload[program_key], provider, phase)
        accounts = [
            AccountMeta(
                parse_pubkey(account[pubkey_key], provider, phase),
                bool(account[signer_key]),
                bool(account[writable_key]),
            )
            for account in payload[accounts_key]
        ]
        data = decode_data(payload[data_key], provider, phase)
    except (KeyError, TypeError) as e:
        raise ProviderError(provider, phase, f"malformed instruction: {e}") from e

    return Instruction(program_id, data, accounts)
