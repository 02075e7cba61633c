"""Lazily-established shared connections.

A provider that needs an async handshake cannot connect while the
aggregator is being constructed. LazyConnection defers the handshake to the
first caller and makes every concurrent first caller share that one attempt.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LazyConnection(Generic[T]):
    """Compute-once holder for an async connection.

    Example:
        session = LazyConnection(lambda: TitanSession.connect(url, token), name="titan")
        conn = await session.get()  # first call connects, later calls reuse

    A failed attempt is reported to every caller that was waiting on it, then
    forgotten, so a later call starts a fresh attempt.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]], name: str = "connection"):
        self._factory = factory
        self.name = name
        self._value: Optional[T] = None
        self._ready = False
        self._task: Optional[asyncio.Task] = None
        self.attempts = 0

    @property
    def is_connected(self) -> bool:
        return self._ready

    async def get(self) -> T:
        """Return the connection, establishing it on first use."""
        if self._ready:
            return self._value  # type: ignore[return-value]

        if self._task is None:
            self.attempts += 1
            logger.debug(f"Opening {self.name} (attempt {self.attempts})")
            self._task = asyncio.ensure_future(self._establish())

        # Shielded so one caller's cancellation does not abort the shared attempt
        return await asyncio.shield(self._task)

    async def _establish(self) -> T:
        try:
            value = await self._factory()
        except BaseException as e:
            self._task = None
            logger.warning(f"Failed to open {self.name}: {type(e).__name__}: {e}")
            raise

        self._value = value
        self._ready = True
        logger.info(f"Opened {self.name}")
        return value
