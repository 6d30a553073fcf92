"""
Bounded, cancellable polling.

Polling is expressed as a policy (interval, attempt cap) applied by
`poll_until`, with the wait between attempts delegated to a Waiter.
The default AsyncioWaiter suspends on the event loop and wakes early when
the CancellationToken fires; tests substitute a waiter that returns
immediately so no real time passes.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol, TypeVar

from .errors import AnalysisCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_MAX_ATTEMPTS = 40


@dataclass(frozen=True)
class PollPolicy:
    """How often to check, and how many checks before giving up."""

    interval: float = DEFAULT_POLL_INTERVAL
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    def __post_init__(self):
        if self.interval < 0:
            raise ValueError("Poll interval must be non-negative")
        if self.max_attempts < 1:
            raise ValueError("Poll policy needs at least one attempt")


class PollingTimeout(Exception):
    """No terminal state was observed within the policy's attempt cap."""

    def __init__(self, attempts: int, last: object = None):
        super().__init__(f"No terminal state after {attempts} attempt(s)")
        self.attempts = attempts
        self.last = last


class CancellationToken:
    """Signals that the owner of a polling loop no longer needs the result."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise AnalysisCancelled(f"Cancelled: {self.reason}")

    async def wait(self) -> None:
        await self._event.wait()


class Waiter(Protocol):
    async def wait(self, seconds: float, token: CancellationToken) -> None:
        ...


class AsyncioWaiter:
    """Sleeps on the event loop, waking early if the token is cancelled."""

    async def wait(self, seconds: float, token: CancellationToken) -> None:
        try:
            await asyncio.wait_for(token.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        token.raise_if_cancelled()


async def poll_until(
    fetch: Callable[[], Awaitable[T]],
    is_done: Callable[[T], bool],
    policy: PollPolicy = PollPolicy(),
    waiter: Optional[Waiter] = None,
    token: Optional[CancellationToken] = None,
    on_attempt: Optional[Callable[[int, T], None]] = None,
) -> T:
    """
    Wait, fetch, and check until `is_done` holds or attempts run out.

    Each attempt waits `policy.interval` before fetching, so the first
    fetch happens one interval after the call.

    Args:
        fetch: Coroutine function returning the current snapshot
        is_done: Terminal-state predicate on a snapshot
        policy: Interval and attempt cap
        waiter: Timed-wait implementation (AsyncioWaiter by default)
        token: Cancellation token checked before every wait and fetch
        on_attempt: Optional observer called with (attempt, snapshot)

    Returns:
        The first snapshot for which `is_done` is true

    Raises:
        PollingTimeout: after `policy.max_attempts` non-terminal snapshots
        AnalysisCancelled: if the token is cancelled
    """
    waiter = waiter or AsyncioWaiter()
    token = token or CancellationToken()
    last = None

    for attempt in range(1, policy.max_attempts + 1):
        token.raise_if_cancelled()
        await waiter.wait(policy.interval, token)
        token.raise_if_cancelled()

        last = await fetch()
        if on_attempt is not None:
            on_attempt(attempt, last)
        if is_done(last):
            return last

    logger.warning(f"[POLL] Gave up after {policy.max_attempts} attempts")
    raise PollingTimeout(policy.max_attempts, last)
