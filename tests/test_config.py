"""Tests for configuration resolution."""

import pytest
from pydantic import ValidationError

from solana_swap.config import (
    DEFAULT_DFLOW_API_URL,
    DEFAULT_JUPITER_API_URL,
    DEFAULT_TITAN_WS_URL,
    SwapConfig,
    get_config,
)
from solana_swap.errors import ConfigurationError
from solana_swap.types import Provider


class TestSwapConfig:
    """Tests for SwapConfig precedence and parsing."""

    def test_defaults(self):
        """Compiled defaults apply when nothing else is set."""
        config = SwapConfig(_env_file=None)

        assert config.jupiter_api_url == DEFAULT_JUPITER_API_URL
        assert config.titan_ws_url == DEFAULT_TITAN_WS_URL
        assert config.dflow_api_url == DEFAULT_DFLOW_API_URL
        assert config.jupiter_api_key is None
        assert config.titan_token is None
        assert config.dflow_max_route_length is None
        assert config.default_slippage_bps == 50

    def test_environment_overrides_default(self, monkeypatch):
        """Environment variables override compiled defaults."""
        monkeypatch.setenv("TITAN_WS_URL", "wss://titan.example/ws")
        monkeypatch.setenv("DFLOW_API_KEY", "env-key")
        monkeypatch.setenv("DFLOW_MAX_ROUTE_LENGTH", "2")

        config = SwapConfig(_env_file=None)

        assert config.titan_ws_url == "wss://titan.example/ws"
        assert config.dflow_api_key == "env-key"
        assert config.dflow_max_route_length == 2

    def test_explicit_value_overrides_environment(self, monkeypatch):
        """Explicit arguments win over the environment."""
        monkeypatch.setenv("JUPITER_API_URL", "https://env.example")

        config = SwapConfig(_env_file=None, jupiter_api_url="https://explicit.example")

        assert config.jupiter_api_url == "https://explicit.example"

    def test_config_is_immutable(self):
        """Configuration cannot be changed after construction."""
        config = SwapConfig(_env_file=None)

        with pytest.raises(ValidationError):
            config.jupiter_api_url = "https://other.example"

    def test_enabled_providers_parsed(self):
        """Provider names are parsed case-insensitively, blanks ignored."""
        config = SwapConfig(_env_file=None, enabled_providers=" Jupiter, dflow ,")

        assert config.providers == frozenset({Provider.JUPITER, Provider.DFLOW})

    def test_all_providers_enabled_by_default(self):
        """Every provider is enabled unless configured otherwise."""
        assert SwapConfig(_env_file=None).providers == frozenset(Provider)

    def test_unknown_provider_is_configuration_error(self):
        """An unknown provider name is a configuration error."""
        config = SwapConfig(_env_file=None, enabled_providers="jupiter,raydium")

        with pytest.raises(ConfigurationError, match="raydium"):
            config.providers

    def test_safe_dict_redacts_credentials(self):
        """Credentials never appear in the safe dict."""
        config = SwapConfig(_env_file=None, jupiter_api_key="secret", titan_token="token")
        data = config.get_safe_dict()

        assert data["jupiter"]["api_key"] == "***"
        assert data["titan"]["token"] == "***"
        assert data["dflow"]["api_key"] == "(not set)"
        assert "secret" not in str(data)

    def test_get_config_is_cached(self):
        """get_config returns one shared instance."""
        assert get_config() is get_config()
