"""ObservableStore — a plain dict whose reads and writes are observed.

get() records a dependency from the field to the running effect; set()
stores the value unconditionally and schedules every subscriber of the field.
Fields need no declaration: writing an unknown field creates it, reading one
returns None.
"""

from __future__ import annotations

from typing import Hashable, Iterator, Mapping

from effectstore.runtime import Runtime


class ObservableStore:
    """Key-based observable record bound to one Runtime."""

    __slots__ = ("_values", "_runtime")

    def __init__(self, initial: Mapping[Hashable, object] | None = None, *, runtime: Runtime | None = None) -> None:
        self._values: dict[Hashable, object] = dict(initial) if initial else {}
        self._runtime = runtime if runtime is not None else Runtime()

    @property
    def runtime(self) -> Runtime:
        return self._runtime

    def get(self, field: Hashable, default: object = None) -> object:
        """Read a field. If inside an effect run, registers the dependency."""
        self._runtime.runner.track((self, field))
        return self._values.get(field, default)

    def set(self, field: Hashable, value: object) -> None:
        """Write a field and schedule its subscribers, even if the value is unchanged."""
        self._values[field] = value
        runtime = self._runtime
        runtime.scheduler.enqueue(runtime.graph.notify((self, field)))

    def update(self, values: Mapping[Hashable, object]) -> None:
        for field, value in values.items():
            self.set(field, value)

    def peek(self, field: Hashable, default: object = None) -> object:
        """Read a field without registering a dependency."""
        return self._values.get(field, default)

    # --- Mapping sugar ---

    def __getitem__(self, field: Hashable) -> object:
        self._runtime.runner.track((self, field))
        return self._values[field]

    def __setitem__(self, field: Hashable, value: object) -> None:
        self.set(field, value)

    def __contains__(self, field: object) -> bool:
        return field in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._values))

    def __repr__(self) -> str:
        return f"ObservableStore({self._values!r})"


def create_store(initial: Mapping[Hashable, object] | None = None, *, runtime: Runtime | None = None) -> ObservableStore:
    """Wrap ``initial`` in an observable store.

    Without ``runtime`` the store gets a Runtime of its own; pass a shared
    one when effects need to read several stores.

    Usage:
        state = create_store({"count": 0})
        log = []
        create_effect(lambda: log.append(state.get("count")), state)
        # log == [0]

        state.set("count", 1)
        # log == [0] until the deferred flush runs, then [0, 1]
    """
    return ObservableStore(initial, runtime=runtime)
