"""Last-request-wins gate for overlapping async fetches.

When a reviewer flips pages faster than evidence resolves, only the
most recently issued request for a channel may apply its result.
Each ``issue()`` bumps the channel's generation; a response whose
token no longer matches the current generation is stale.

Single event loop only: each viewer owns its own gate.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RequestToken:
    channel: str
    generation: int


class LatestRequestGate:
    """Tracks request generations per channel.

    Usage::

        gate = LatestRequestGate()
        result = await gate.run("page", fetch)
        if result is None:
            return  # superseded by a newer request
    """

    def __init__(self) -> None:
        self._generations: dict[str, int] = {}

    def issue(self, channel: str) -> RequestToken:
        """Start a new request, invalidating earlier ones on *channel*."""
        generation = self._generations.get(channel, 0) + 1
        self._generations[channel] = generation
        return RequestToken(channel=channel, generation=generation)

    def is_current(self, token: RequestToken) -> bool:
        return self._generations.get(token.channel) == token.generation

    def invalidate(self, channel: str) -> None:
        """Mark every in-flight request on *channel* as stale."""
        self._generations[channel] = self._generations.get(channel, 0) + 1

    async def run(
        self,
        channel: str,
        operation: Callable[[], Awaitable[T]],
    ) -> T | None:
        """Await *operation*; return None if a newer request was issued.

        Errors from a stale operation are dropped along with its result.
        """
        token = self.issue(channel)
        try:
            result = await operation()
        except Exception:
            if not self.is_current(token):
                return None
            raise
        if not self.is_current(token):
            return None
        return result

    def generation(self, channel: str) -> int:
        return self._generations.get(channel, 0)
