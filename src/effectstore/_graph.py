"""Dependency graph — which effects read which store fields.

Keys are ``(store, field)`` pairs so that stores sharing one runtime never
collide on equal field names. Subscriber lists are insertion-ordered dicts:
an effect is subscribed to a key at most once, for the lifetime of the graph.

Edges are never dropped when an effect stops reading a field. A stale edge
costs one extra re-run per write; it never causes a needed re-run to be
skipped. Runtimes created with ``prune_stale_edges=True`` call ``prune()``
after each run to drop them instead.
"""

from __future__ import annotations

from typing import Callable, Hashable, Iterable

Effect = Callable[[], None]
Key = tuple[object, Hashable]


class DependencyGraph:
    """Ordered ``key -> effects`` subscription table.

    Effects are matched by identity (``id()``), never by ``==``/``hash``:
    two equal-comparing callables are two effects, and unhashable callables
    subscribe like any other. Subscriber dicts hold the effect itself, which
    keeps its id valid for as long as any edge references it.
    """

    __slots__ = ("_subscribers", "_fields")

    def __init__(self) -> None:
        self._subscribers: dict[Key, dict[int, Effect]] = {}
        self._fields: dict[int, set[Key]] = {}  # reverse index, by id(effect)

    def subscribe(self, key: Key, effect: Effect) -> None:
        """Record that ``effect`` reads ``key``. Idempotent."""
        subscribers = self._subscribers.setdefault(key, {})
        effect_id = id(effect)
        if effect_id not in subscribers:
            subscribers[effect_id] = effect
            self._fields.setdefault(effect_id, set()).add(key)

    def notify(self, key: Key) -> list[Effect]:
        """Snapshot of ``key``'s subscribers, in subscription order."""
        subscribers = self._subscribers.get(key)
        return list(subscribers.values()) if subscribers else []

    def unsubscribe(self, key: Key, effect: Effect) -> None:
        effect_id = id(effect)
        subscribers = self._subscribers.get(key)
        if subscribers is not None:
            subscribers.pop(effect_id, None)
            if not subscribers:
                del self._subscribers[key]
        keys = self._fields.get(effect_id)
        if keys is not None:
            keys.discard(key)
            if not keys:
                del self._fields[effect_id]

    def prune(self, effect: Effect, keep: Iterable[Key]) -> None:
        """Drop every edge of ``effect`` whose key is not in ``keep``."""
        keep = set(keep)
        for key in self.fields_of(effect) - keep:
            self.unsubscribe(key, effect)

    def subscribers(self, key: Key) -> list[Effect]:
        return self.notify(key)

    def fields_of(self, effect: Effect) -> set[Key]:
        return set(self._fields.get(id(effect), ()))

    def __len__(self) -> int:
        """Total number of edges."""
        return sum(len(s) for s in self._subscribers.values())

    def __repr__(self) -> str:
        return f"DependencyGraph({len(self._subscribers)} fields, {len(self)} edges)"
