"""On-chain data access needed to assemble swap transactions."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from solana.rpc.async_api import AsyncClient
from solders.address_lookup_table_account import AddressLookupTableAccount
from solders.hash import Hash
from solders.pubkey import Pubkey

logger = logging.getLogger(__name__)

# Address lookup table account layout: fixed metadata header, then addresses
LOOKUP_TABLE_META_SIZE = 56
PUBKEY_SIZE = 32


class ChainDataError(Exception):
    """Raised when chain data cannot be read or decoded."""

    pass


def decode_lookup_table(key: Pubkey, data: bytes) -> AddressLookupTableAccount:
    """Decode the raw data of an address lookup table account.

    Args:
        key: Address of the lookup table account
        data: Raw account data

    Returns:
        The table with its stored addresses
    """
    if len(data) < LOOKUP_TABLE_META_SIZE:
        raise ChainDataError(f"lookup table {key} data too short ({len(data)} bytes)")

    body = data[LOOKUP_TABLE_META_SIZE:]
    if len(body) % PUBKEY_SIZE != 0:
        raise ChainDataError(f"lookup table {key} has a partial address entry")

    addresses = [
        Pubkey.from_bytes(body[i : i + PUBKEY_SIZE]) for i in range(0, len(body), PUBKEY_SIZE)
    ]
    return AddressLookupTableAccount(key=key, addresses=addresses)


class ChainContext(ABC):
    """Read access to the chain, injected by the caller."""

    @abstractmethod
    async def fetch_lookup_table(self, address: Pubkey) -> AddressLookupTableAccount:
        """Fetch and decode one address lookup table."""
        pass

    @abstractmethod
    async def get_latest_blockhash(self) -> tuple[Hash, int]:
        """Return the latest blockhash and its last valid block height."""
        pass


class RpcChainContext(ChainContext):
    """ChainContext backed by a Solana JSON-RPC node."""

    def __init__(self, client: Optional[AsyncClient] = None, rpc_url: Optional[str] = None):
        """Initialize from an existing client or an RPC URL.

        Args:
            client: solana-py async client to reuse
            rpc_url: RPC endpoint used when no client is given
        """
        if client is None:
            if rpc_url is None:
                raise ValueError("either client or rpc_url is required")
            client = AsyncClient(rpc_url)
        self.client = client

    async def fetch_lookup_table(self, address: Pubkey) -> AddressLookupTableAccount:
        logger.debug(f"Fetching lookup table {address}")
        response = await self.client.get_account_info(address)
        account = response.value
        if account is None:
            raise ChainDataError(f"lookup table {address} not found")
        return decode_lookup_table(address, bytes(account.data))

    async def get_latest_blockhash(self) -> tuple[Hash, int]:
        response = await self.client.get_latest_blockhash()
        return response.value.blockhash, response.value.last_valid_block_height

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "RpcChainContext":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
