"""Normalization of provider swap results into unsigned transactions.

This is the only place that branches on the SwapResult variant. Everything
downstream consumes UnsignedTransaction.
"""

import base64
import binascii
import logging
from typing import Optional

from solders.hash import Hash
from solders.message import Message, MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from solana_swap.chain import ChainContext
from solana_swap.errors import NormalizationError
from solana_swap.types import InstructionsResult, SwapResult, TransactionResult, UnsignedTransaction

logger = logging.getLogger(__name__)


def placeholder_signatures(count: int) -> list[Signature]:
    """Zero-filled signatures reserving one slot per required signer."""
    return [Signature.default() for _ in range(count)]


def decode_transaction(encoded: str) -> VersionedTransaction:
    """Decode a base64 wire-encoded transaction."""
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise NormalizationError(f"transaction payload is not valid base64: {e}") from e

    try:
        return VersionedTransaction.from_bytes(raw)
    except Exception as e:
        raise NormalizationError(f"failed to decode transaction: {e}") from e


def with_blockhash(transaction: VersionedTransaction, blockhash: Hash) -> VersionedTransaction:
    """Rebuild a transaction around a new blockhash, resetting its signatures.

    Changing the message invalidates any signature already present, so every
    slot becomes a placeholder.
    """
    message = transaction.message
    if isinstance(message, MessageV0):
        message = MessageV0(
            message.header,
            message.account_keys,
            blockhash,
            message.instructions,
            message.address_table_lookups,
        )
    else:
        header = message.header
        message = Message.new_with_compiled_instructions(
            header.num_required_signatures,
            header.num_readonly_signed_accounts,
            header.num_readonly_unsigned_accounts,
            message.account_keys,
            blockhash,
            message.instructions,
        )
    return VersionedTransaction.populate(
        message, placeholder_signatures(message.header.num_required_signatures)
    )


async def _compile_instructions(
    result: InstructionsResult,
    payer: Pubkey,
    blockhash: Optional[Hash],
    chain: Optional[ChainContext],
    last_valid_block_height: Optional[int],
) -> UnsignedTransaction:
    lookup_tables = []
    if result.address_lookup_table_addresses:
        if chain is None:
            raise NormalizationError(
                f"{len(result.address_lookup_table_addresses)} lookup table(s) referenced "
                "but no chain context was given to fetch them"
            )
        for address in result.address_lookup_table_addresses:
            try:
                lookup_tables.append(await chain.fetch_lookup_table(address))
            except Exception as e:
                raise NormalizationError(f"failed to fetch lookup table {address}: {e}") from e

    try:
        message = MessageV0.try_compile(
            payer,
            result.instructions,
            lookup_tables,
            blockhash if blockhash is not None else Hash.default(),
        )
    except Exception as e:
        raise NormalizationError(f"failed to compile message: {e}") from e

    # The caller signs later, so reserve slots rather than signing with keys
    num_signers = message.header.num_required_signatures
    transaction = VersionedTransaction.populate(message, placeholder_signatures(num_signers))
    logger.debug(
        f"Compiled {len(result.instructions)} instructions with "
        f"{len(lookup_tables)} lookup table(s), {num_signers} signer slot(s)"
    )
    return UnsignedTransaction(
        transaction=transaction,
        last_valid_block_height=last_valid_block_height if blockhash is not None else None,
        compute_units=result.compute_units,
    )


def _prepare_transaction(
    result: TransactionResult,
    blockhash: Optional[Hash],
    last_valid_block_height: Optional[int],
) -> UnsignedTransaction:
    transaction = result.transaction
    if isinstance(transaction, str):
        transaction = decode_transaction(transaction)

    expiry = result.last_valid_block_height or None
    if blockhash is not None and blockhash != transaction.message.recent_blockhash:
        transaction = with_blockhash(transaction, blockhash)
        # The provider's expiry belongs to the blockhash that was just replaced
        expiry = last_valid_block_height
    elif blockhash is not None and last_valid_block_height is not None:
        expiry = last_valid_block_height

    return UnsignedTransaction(
        transaction=transaction,
        last_valid_block_height=expiry,
    )


async def into_unsigned_transaction(
    result: SwapResult,
    payer: Pubkey,
    blockhash: Optional[Hash] = None,
    chain: Optional[ChainContext] = None,
    last_valid_block_height: Optional[int] = None,
) -> UnsignedTransaction:
    """Collapse either swap result shape into one unsigned transaction.

    Args:
        result: Instruction-based or transaction-based swap result
        payer: Fee payer for compiled messages
        blockhash: Recent blockhash; replaces the provider's when given
        chain: Used to fetch lookup tables referenced by instructions
        last_valid_block_height: Expiry of blockhash. When blockhash replaces
            the provider's, this replaces the provider's expiry too, and None
            means unknown.

    Returns:
        Transaction with one placeholder signature per required signer
    """
    if isinstance(result, InstructionsResult):
        return await _compile_instructions(result, payer, blockhash, chain, last_valid_block_height)
    if isinstance(result, TransactionResult):
        return _prepare_transaction(result, blockhash, last_valid_block_height)
    raise NormalizationError(f"unsupported swap result type: {type(result).__name__}")
