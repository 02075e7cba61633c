"""Exception hierarchy for swap aggregation.

Every failure raised by the aggregator is a SwapError, so callers can catch
one base class and still branch on the specific failure.
"""

from typing import Optional

from solana_swap.types import Provider


class SwapError(Exception):
    """Base exception for all swap aggregation failures."""

    pass


class ConfigurationError(SwapError):
    """Raised when the configuration is missing, malformed or inconsistent."""

    pass


class ProviderNotConfiguredError(ConfigurationError):
    """Raised when a provider is selected that is not enabled in this aggregator."""

    def __init__(self, provider: Provider):
        super().__init__(f"provider not configured: {provider}")
        self.provider = provider


class ProviderConnectionError(SwapError):
    """Raised when a provider's persistent session cannot be established or used."""

    def __init__(self, provider: Provider, message: str):
        super().__init__(f"{provider} connection error: {message}")
        self.provider = provider
        self.message = message


class ProviderError(SwapError):
    """Raised when a provider's quote or swap call fails.

    Attributes:
        provider: Provider that failed
        phase: "quote" or "swap"
        message: Provider or transport error detail
        status_code: HTTP status when the provider answered with an error status
    """

    def __init__(
        self,
        provider: Provider,
        phase: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(f"{provider} {phase} error: {message}")
        self.provider = provider
        self.phase = phase
        self.message = message
        self.status_code = status_code


class NoRouteFoundError(ProviderError):
    """Raised when a provider reports that no route exists for the pair."""

    def __init__(self, provider: Provider, phase: str, message: str = "no route found"):
        super().__init__(provider, phase, message)


class NormalizationError(SwapError):
    """Raised when a swap result cannot be turned into an unsigned transaction."""

    pass
