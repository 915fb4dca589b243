"""
Local persistence of the application state.

The state lives in one canonical JSON file. Loading never fails hard: a
missing or corrupt file falls back to the seed state so the application can
always start.
"""

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .backup import export_json, state_from_json
from .logging_utils import get_logger, log_warning
from .models import AppState, PartialState, default_state


class StoreError(Exception):
    """Raised when the state file cannot be written or removed."""
    pass


class StateStore:
    """
    Reads and writes the state file.

    A state file that cannot be decoded is renamed to
    "<name>.corrupt-<timestamp>" on load and the seed state is used.

    Example:
        >>> store = StateStore("/tmp/state.json")
        >>> state = store.load()
        >>> store.save(state)
    """

    def __init__(self, path: Union[str, Path], user_name: Optional[str] = None):
        """
        Initialize the store.

        Args:
            path: Location of the JSON state file
            user_name: Owner name for a freshly seeded state
        """
        self.path = Path(path).expanduser()
        self.user_name = user_name
        self.logger = get_logger('store')

    def _seed(self) -> AppState:
        state = default_state()
        if self.user_name:
            state.meta.user_name = self.user_name
        return state

    def load(self) -> AppState:
        """
        Load the persisted state.

        Returns:
            Stored state, or the seed state if the file is missing or unreadable
        """
        if not self.path.exists():
            self.logger.debug(f"No state file at {self.path}, using seed state")
            return self._seed()
        try:
            return state_from_json(self.path.read_text(encoding='utf-8'))
        except OSError as e:
            log_warning(f"Failed to read state from {self.path}: {e}; using seed state", self.logger)
            return self._seed()
        except ValueError as e:
            log_warning(f"Corrupt state file {self.path}: {e}; using seed state", self.logger)
            self._move_aside()
            return self._seed()

    def _move_aside(self):
        """Rename an unreadable state file so the next save cannot overwrite it."""
        stamp = datetime.now().strftime('%Y%m%d-%H%M%S')
        target = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        try:
            self.path.replace(target)
        except OSError as e:
            log_warning(f"Could not move {self.path} aside: {e}", self.logger)
            return
        log_warning(f"Kept the unreadable file as {target}", self.logger)

    def save(self, state: AppState):
        """
        Write the state atomically (temporary file, then replace).

        Raises:
            StoreError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix='.state-', suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(export_json(state))
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StoreError(f"Failed to save state to {self.path}: {e}")

    def apply(self, partial: PartialState) -> AppState:
        """
        Merge a partial state into the stored state and persist the result.

        Returns:
            The merged state
        """
        merged = partial.merge_into(self.load())
        self.save(merged)
        return merged

    def reset(self) -> AppState:
        """
        Delete the state file and return a fresh seed state.

        Raises:
            StoreError: If the file exists but cannot be removed
        """
        try:
            if self.path.exists():
                self.path.unlink()
        except OSError as e:
            raise StoreError(f"Failed to remove {self.path}: {e}")
        return self._seed()
