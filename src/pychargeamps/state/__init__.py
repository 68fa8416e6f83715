"""State/store layer.

The bridge writes everything it learns from the cloud API into a
hierarchical state tree and reads user intent back from it. The tree itself
belongs to the host; :class:`InMemoryStateStore` is the bundled
implementation used by tests and the standalone runner.
"""

from pychargeamps.state.mirror import StateMirror
from pychargeamps.state.store import InMemoryStateStore, StateChangeCallback, StateStore

__all__ = [
    "InMemoryStateStore",
    "StateChangeCallback",
    "StateMirror",
    "StateStore",
]
