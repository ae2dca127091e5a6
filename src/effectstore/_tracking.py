"""Effect execution and read tracking — the heart of effectstore.

The runner keeps a stack of currently-executing effects. While an effect is
on top of the stack, any ObservableStore.get() call records an edge from the
field to that effect. An effect created inside another effect's run is pushed
above it; the outer effect resumes tracking once the inner one returns.

Every run, initial or scheduled, goes through ``EffectRunner.run`` so each
run re-establishes its own dependencies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from effectstore._graph import DependencyGraph, Effect, Key


class EffectRunner:
    """Runs effects and attributes reads to the innermost running effect."""

    __slots__ = ("_graph", "_stack", "_prune")

    def __init__(self, graph: DependencyGraph, *, prune_stale_edges: bool = False) -> None:
        self._graph = graph
        # One frame per running effect: (effect, keys read during this run)
        self._stack: list[tuple[Effect, set[Key]]] = []
        self._prune = prune_stale_edges

    @property
    def current(self) -> Effect | None:
        return self._stack[-1][0] if self._stack else None

    @property
    def depth(self) -> int:
        return len(self._stack)

    def track(self, key: Key) -> None:
        """Register a read of ``key``. No-op outside an effect run."""
        if not self._stack:
            return
        effect, seen = self._stack[-1]
        if key not in seen:
            seen.add(key)
            self._graph.subscribe(key, effect)

    def run(self, effect: Effect) -> None:
        """Invoke ``effect`` synchronously with tracking enabled."""
        seen: set[Key] = set()
        self._stack.append((effect, seen))
        try:
            effect()
        finally:
            self._stack.pop()
        if self._prune:
            self._graph.prune(effect, seen)
