"""effectstore: a fine-grained reactive key-value store with batched effects."""

from importlib.metadata import version as _version

__version__ = _version("effectstore")

from effectstore._graph import DependencyGraph
from effectstore._tracking import EffectRunner
from effectstore.scheduler import Scheduler, FlushState, FlushLimitExceeded
from effectstore.runtime import Runtime, create_effect
from effectstore.store import ObservableStore, create_store
# textual NOT auto-imported — opt-in only

__all__ = [
    "DependencyGraph",
    "EffectRunner",
    "Scheduler",
    "FlushState",
    "FlushLimitExceeded",
    "Runtime",
    "create_effect",
    "ObservableStore",
    "create_store",
]
