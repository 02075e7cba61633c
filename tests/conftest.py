"""Pytest configuration and fixtures."""

import os

import pytest
from solders.pubkey import Pubkey

# Keep a developer's .env or shell exports out of the test run
CONFIG_ENV_VARS = (
    "DEFAULT_SLIPPAGE_BPS",
    "ENABLED_PROVIDERS",
    "REQUEST_TIMEOUT",
    "JUPITER_API_URL",
    "JUPITER_API_KEY",
    "TITAN_WS_URL",
    "TITAN_TOKEN",
    "DFLOW_API_URL",
    "DFLOW_API_KEY",
    "DFLOW_MAX_ROUTE_LENGTH",
    "SOLANA_RPC_URL",
)
for name in CONFIG_ENV_VARS:
    os.environ.pop(name, None)

from solana_swap.config import get_config

SOL_MINT = Pubkey.from_string("So11111111111111111111111111111111111111112")
USDC_MINT = Pubkey.from_string("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v")


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Reset environment-derived configuration before each test."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def sol_mint() -> Pubkey:
    return SOL_MINT


@pytest.fixture
def usdc_mint() -> Pubkey:
    return USDC_MINT


@pytest.fixture
def wallet() -> Pubkey:
    return Pubkey.new_unique()
