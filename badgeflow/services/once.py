"""Single-flight lazy initialization for asyncio.

``AsyncOnce`` wraps an expensive async setup (issuer session, consent
contract) so it runs AT MOST ONCE per success, no matter how many
requests ask for it at the same moment:

  - the first caller starts the setup as a task;
  - callers arriving while it runs await that same task;
  - after success every caller gets the cached value immediately;
  - after failure every waiting caller sees the exception, and the
    guard resets so the NEXT caller retries.

The setup task is shielded: a caller that gets cancelled (client
disconnect) does not cancel the setup the other callers are waiting on.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class AsyncOnce(Generic[T]):
    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        self._factory = factory
        self._pending: asyncio.Future[T] | None = None
        self._value: T | None = None
        self._done = False

    @property
    def initialized(self) -> bool:
        return self._done

    def peek(self) -> T | None:
        return self._value if self._done else None

    async def get(self) -> T:
        if self._done:
            return self._value  # type: ignore[return-value]
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._run())
        return await asyncio.shield(self._pending)

    async def _run(self) -> T:
        try:
            value = await self._factory()
        except BaseException:
            self._pending = None
            raise
        self._value = value
        self._done = True
        self._pending = None
        return value
