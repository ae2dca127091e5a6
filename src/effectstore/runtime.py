"""Runtime — an explicit reactive scope.

A Runtime owns one dependency graph, one effect runner and one scheduler.
Stores and effects created against different runtimes never see each other,
so several independent reactive systems can live in one process.
"""

from __future__ import annotations

from effectstore._graph import DependencyGraph, Effect
from effectstore._tracking import EffectRunner
from effectstore.scheduler import DEFAULT_MAX_FLUSH_RUNS, Defer, Scheduler


class Runtime:
    """Scope owning the graph, runner and pending queue of a reactive system.

    Args:
        defer: called with the flush callback once per batch. Defaults to the
            running asyncio loop's ``call_soon``; without a running loop the
            batch waits for an explicit ``flush()``.
        max_flush_runs: effect runs allowed in one flush cycle before
            ``FlushLimitExceeded`` is raised. ``None`` disables the limit.
        prune_stale_edges: after each run, drop edges to fields the effect
            no longer read.
    """

    def __init__(
        self,
        defer: Defer | None = None,
        *,
        max_flush_runs: int | None = DEFAULT_MAX_FLUSH_RUNS,
        prune_stale_edges: bool = False,
    ) -> None:
        self.graph = DependencyGraph()
        self.runner = EffectRunner(self.graph, prune_stale_edges=prune_stale_edges)
        self.scheduler = Scheduler(self.runner, defer, max_flush_runs=max_flush_runs)

    @property
    def pending_count(self) -> int:
        return self.scheduler.pending_count

    def create_effect(self, fn: Effect) -> None:
        """Run fn now and re-run it whenever a field it read is written."""
        self.runner.run(fn)

    def flush(self) -> None:
        """Drain pending re-runs synchronously instead of waiting for the deferred flush."""
        self.scheduler.flush()

    def __repr__(self) -> str:
        return f"Runtime({self.scheduler.state.value}, pending={self.pending_count}, {self.graph!r})"


def create_effect(fn: Effect, runtime) -> None:
    """Run fn immediately under ``runtime`` and keep it subscribed.

    ``runtime`` is a Runtime, or a store whose runtime should be used.
    Nothing is returned: effects cannot be paused or disposed.

    Usage:
        store = create_store({"a": 1, "b": 2})
        create_effect(lambda: store.set("sum", store.get("a") + store.get("b")), store)
        # store.get("sum") == 3
    """
    if not isinstance(runtime, Runtime):
        owner = getattr(runtime, "runtime", None)
        if not isinstance(owner, Runtime):
            raise TypeError(f"expected a Runtime or a store, got {type(runtime).__name__}")
        runtime = owner
    runtime.create_effect(fn)
