"""
State Storage
=============
Injectable keyed storage with passive expiry.
"""

from .base import StateStore, WindowDecision
from .memory import InMemoryStateStore
from .redis_store import RedisStateStore
from .scripts import SLIDING_WINDOW_SCRIPT

__all__ = [
    # Interface
    "StateStore",
    "WindowDecision",
    # Backends
    "InMemoryStateStore",
    "RedisStateStore",
    # Scripts
    "SLIDING_WINDOW_SCRIPT",
]
