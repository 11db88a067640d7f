"""Observable single-writer container holding the latest snapshot."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


class StateFlow(Generic[T]):
    """Hold one value and broadcast every replacement to subscribers.

    Writes replace the whole value, so a reader only ever observes
    complete snapshots.  Delivery is conflated: a reader that falls
    behind skips straight to the newest value.  Writing a value equal
    to the current one is a no-op.

    Args:
        initial: The starting value.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._version = 0
        self._condition: asyncio.Condition | None = None
        self._pending: set[asyncio.Task] = set()

    @property
    def value(self) -> T:
        """The current snapshot."""
        return self._value

    @property
    def version(self) -> int:
        """Number of distinct values emitted since construction."""
        return self._version

    def emit(self, value: T) -> None:
        """Replace the current value and wake subscribers."""
        if value == self._value:
            return
        self._value = value
        self._version += 1
        logger.debug("StateFlow advanced to version %d", self._version)
        if self._condition is not None:
            self._notify()

    async def subscribe(self) -> AsyncIterator[T]:
        """Yield the current value, then each newer value as it is emitted."""
        condition = self._get_condition()
        seen = self._version
        yield self._value
        while True:
            async with condition:
                await condition.wait_for(lambda: self._version != seen)
                seen = self._version
                value = self._value
            yield value

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_condition(self) -> asyncio.Condition:
        if self._condition is None:
            self._condition = asyncio.Condition()
        return self._condition

    def _notify(self) -> None:
        condition = self._condition

        async def _wake() -> None:
            async with condition:
                condition.notify_all()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Subscribers only wait inside a running loop.
            return
        task = loop.create_task(_wake())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
