from .base import CounterStore, InMemoryCounterStore
from .factory import build_counter_store

__all__ = [
    "CounterStore",
    "InMemoryCounterStore",
    "build_counter_store",
]
