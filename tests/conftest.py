import pytest

from effectstore import Runtime


class Deferred:
    """Stand-in for an event loop: collects deferred callbacks until run()."""

    def __init__(self):
        self.callbacks = []

    def __call__(self, callback):
        self.callbacks.append(callback)

    def run(self):
        callbacks, self.callbacks = self.callbacks, []
        for callback in callbacks:
            callback()


@pytest.fixture
def deferred():
    return Deferred()


@pytest.fixture
def runtime(deferred):
    return Runtime(deferred)
