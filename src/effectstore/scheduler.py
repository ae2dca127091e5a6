"""Scheduler — batches effect re-runs into one deferred flush.

Writes enqueue the invalidated effects; the first enqueue of a batch defers a
single flush through the ``defer`` callable (by default the running asyncio
loop's ``call_soon``). The flush drains the queue FIFO until it is observed
empty, so effects enqueued by re-runs are processed in the same cycle.

The queue is not deduplicated: an effect invalidated by two writes in one
batch runs twice.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections import deque
from typing import TYPE_CHECKING, Callable, Iterable

if TYPE_CHECKING:
    from effectstore._graph import Effect
    from effectstore._tracking import EffectRunner

logger = logging.getLogger("effectstore.scheduler")

Defer = Callable[[Callable[[], None]], object]

DEFAULT_MAX_FLUSH_RUNS = 10_000


class FlushLimitExceeded(RuntimeError):
    """A flush cycle ran more effects than the scheduler allows."""


class FlushState(enum.Enum):
    IDLE = "idle"
    FLUSH_PENDING = "flush_pending"
    FLUSHING = "flushing"


class Scheduler:
    """Pending-queue owner and flush state machine."""

    def __init__(
        self,
        runner: EffectRunner,
        defer: Defer | None = None,
        *,
        max_flush_runs: int | None = DEFAULT_MAX_FLUSH_RUNS,
    ) -> None:
        self._runner = runner
        self._defer = defer
        self._max_flush_runs = max_flush_runs
        self._queue: deque[Effect] = deque()
        self._scheduled = False  # a deferred callback is outstanding
        self._flushing = False

    @property
    def state(self) -> FlushState:
        if self._flushing:
            return FlushState.FLUSHING
        if self._scheduled or self._queue:
            return FlushState.FLUSH_PENDING
        return FlushState.IDLE

    @property
    def pending_count(self) -> int:
        """Number of queued re-runs. Useful for testing."""
        return len(self._queue)

    def enqueue(self, effects: Iterable[Effect]) -> None:
        before = len(self._queue)
        self._queue.extend(effects)
        if len(self._queue) > before:
            self.ensure_flush_scheduled()

    def ensure_flush_scheduled(self) -> None:
        """Defer one flush unless one is already outstanding or running."""
        if self._scheduled or self._flushing:
            return
        if self._defer is not None:
            self._defer(self._deferred_flush)
        else:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                # Stays pending until flush() is called or a later write finds a loop.
                logger.debug("No event loop to defer flush; %d effect(s) pending", len(self._queue))
                return
            loop.call_soon(self._deferred_flush)
        self._scheduled = True
        logger.debug("Flush scheduled with %d effect(s) pending", len(self._queue))

    def _deferred_flush(self) -> None:
        self._scheduled = False
        self.flush()

    def flush(self) -> None:
        """Drain the pending queue, including work enqueued while draining.

        Re-entrant calls (from inside a running effect) return immediately.
        An exception from an effect drops the rest of the cycle and propagates.
        """
        if self._flushing:
            return
        self._flushing = True
        runs = 0
        try:
            while self._queue:
                if self._max_flush_runs is not None and runs >= self._max_flush_runs:
                    raise FlushLimitExceeded(
                        f"Flush ran more than {self._max_flush_runs} effects without settling. "
                        "There is likely an update cycle: an effect writes a field that "
                        "(directly or indirectly) re-triggers itself."
                    )
                effect = self._queue.popleft()
                runs += 1
                self._runner.run(effect)
        except BaseException:
            if self._queue:
                logger.warning("Flush aborted; dropping %d pending effect(s)", len(self._queue))
                self._queue.clear()
            raise
        finally:
            self._flushing = False
        logger.debug("Flush complete after %d run(s)", runs)
