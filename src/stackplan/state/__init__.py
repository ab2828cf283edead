"""Provider state model and stores."""

from .models import ProviderState, StateEntry
from .store import StateStore, InMemoryStateStore, JsonFileStateStore

__all__ = ["ProviderState", "StateEntry", "StateStore", "InMemoryStateStore", "JsonFileStateStore"]
