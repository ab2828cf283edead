"""State stores: persist ProviderState between runs."""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from pydantic import ValidationError
from ..utils.errors import StateStoreError
from ..utils.logging import get_logger
from .models import ProviderState

logger = get_logger("state.store")


class StateStore(ABC):
    """
    Abstract interface for state persistence.

    The planner reads state once at entry; the executor writes it after
    every successful action.
    """

    @abstractmethod
    def load(self) -> ProviderState:
        """Return the last saved state (empty if nothing was saved)."""
        pass

    @abstractmethod
    def save(self, state: ProviderState) -> None:
        """Persist state, replacing what was there."""
        pass


class InMemoryStateStore(StateStore):
    """Keeps state in memory; used by tests and dry runs."""

    def __init__(self, state: Optional[ProviderState] = None):
        self._state = state.model_copy(deep=True) if state else ProviderState()
        self.save_count = 0

    def load(self) -> ProviderState:
        return self._state.model_copy(deep=True)

    def save(self, state: ProviderState) -> None:
        self._state = state.model_copy(deep=True)
        self.save_count += 1


class JsonFileStateStore(StateStore):
    """Stores state as a JSON document on local disk."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> ProviderState:
        """
        Load state from the JSON file.

        Returns:
            ProviderState (empty if the file does not exist yet)

        Raises:
            StateStoreError: If the file is unreadable or malformed
        """
        if not self.path.exists():
            logger.info(f"No state file at {self.path}, starting from empty state")
            return ProviderState()

        if not self.path.is_file():
            raise StateStoreError(f"State path is not a file: {self.path}")

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StateStoreError(f"Invalid JSON in state file {self.path}: {e}")
        except OSError as e:
            raise StateStoreError(f"Error reading state file {self.path}: {e}")

        try:
            state = ProviderState.model_validate(data)
        except ValidationError as e:
            raise StateStoreError(f"Malformed state file {self.path}: {e}")

        logger.info(f"Loaded state from {self.path} ({len(state)} resources)")
        return state

    def save(self, state: ProviderState) -> None:
        """Write state atomically (temp file then rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(state.model_dump(mode="json"), f, indent=2)
            tmp_path.replace(self.path)
        except OSError as e:
            raise StateStoreError(f"Failed to write state file {self.path}: {e}")
        logger.debug(f"Saved state to {self.path} ({len(state)} resources)")
