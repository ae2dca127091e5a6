"""Textual integration for effectstore. Opt-in — requires textual.

Flushes are deferred onto the app's message loop with ``call_next``; writes
from worker threads are marshaled with ``call_from_thread``. Guarded effects
skip while the app is not running or its widget tree is being replaced.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from effectstore.runtime import Runtime, create_effect as _create_effect

# Module-owned pause state — keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


def runtime_for(app, **kwargs) -> Runtime:
    """Runtime whose batches flush right after the app's current message."""
    return Runtime(app.call_next, **kwargs)


@contextmanager
def pause(app):
    """Suspend guarded effects during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def create_effect(app, runtime, fn) -> None:
    """create_effect() that safely drives Textual widgets.

    Skips while paused or not running, and ignores NoMatches from widget
    queries. Fields read before a skipped run stay subscribed, but a run that
    is skipped reads nothing: an effect created while the app is not running
    or is paused subscribes to no field and never re-runs. Create effects
    once the app is running (e.g. in on_mount).
    """

    def _guarded():
        if not is_safe(app):
            return
        try:
            fn()
        except NoMatches:
            pass

    _create_effect(_guarded, runtime)


def threadsafe_setter(app, store):
    """Return set(field, value) usable from any thread. Call from the app thread.

    Writes from other threads are marshaled with call_from_thread, so the
    scheduler is only ever touched on the app thread.
    """
    _main = threading.get_ident()

    def _set(field, value) -> None:
        if threading.get_ident() != _main:
            app.call_from_thread(store.set, field, value)
        else:
            store.set(field, value)

    return _set
