"""Tests for lazily-established shared connections."""

import asyncio

import pytest

from solana_swap.utils.lazy import LazyConnection


class CountingFactory:
    """Connection factory that counts calls and can be told to fail."""

    def __init__(self, fail_times: int = 0, delay: float = 0.01):
        self.calls = 0
        self.fail_times = fail_times
        self.delay = delay

    async def __call__(self):
        self.calls += 1
        await asyncio.sleep(self.delay)
        if self.calls <= self.fail_times:
            raise ConnectionError(f"refused (call {self.calls})")
        return f"conn-{self.calls}"


class TestLazyConnection:
    """Tests for LazyConnection."""

    def test_construction_does_not_connect(self):
        factory = CountingFactory()
        lazy = LazyConnection(factory, name="test")

        assert factory.calls == 0
        assert lazy.attempts == 0
        assert not lazy.is_connected

    @pytest.mark.asyncio
    async def test_concurrent_first_callers_share_one_attempt(self):
        """Ten simultaneous first callers trigger exactly one handshake."""
        factory = CountingFactory()
        lazy = LazyConnection(factory, name="test")

        results = await asyncio.gather(*(lazy.get() for _ in range(10)))

        assert factory.calls == 1
        assert lazy.attempts == 1
        assert results == ["conn-1"] * 10
        assert lazy.is_connected

    @pytest.mark.asyncio
    async def test_later_calls_reuse_connection(self):
        factory = CountingFactory()
        lazy = LazyConnection(factory, name="test")

        first = await lazy.get()
        second = await lazy.get()

        assert first is second
        assert factory.calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_failure(self):
        """Every waiting caller sees the same exception object."""
        factory = CountingFactory(fail_times=1)
        lazy = LazyConnection(factory, name="test")

        outcomes = await asyncio.gather(*(lazy.get() for _ in range(5)), return_exceptions=True)

        assert factory.calls == 1
        assert all(isinstance(o, ConnectionError) for o in outcomes)
        assert all(o is outcomes[0] for o in outcomes)
        assert not lazy.is_connected

    @pytest.mark.asyncio
    async def test_retry_after_failure(self):
        """A failed attempt is forgotten so the next call retries."""
        factory = CountingFactory(fail_times=1)
        lazy = LazyConnection(factory, name="test")

        with pytest.raises(ConnectionError):
            await lazy.get()

        assert await lazy.get() == "conn-2"
        assert lazy.attempts == 2

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_abort_attempt(self):
        """Cancelling one waiter leaves the shared attempt running."""
        factory = CountingFactory(delay=0.05)
        lazy = LazyConnection(factory, name="test")

        impatient = asyncio.ensure_future(lazy.get())
        patient = asyncio.ensure_future(lazy.get())
        await asyncio.sleep(0.01)
        impatient.cancel()

        assert await patient == "conn-1"
        assert factory.calls == 1
        with pytest.raises(asyncio.CancelledError):
            await impatient
