"""Active-profile state persisted in state.json."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pydantic

from claude_switch.errors import StorageError
from claude_switch.schemas.state import State
from claude_switch.secure_io import write_secure

__all__ = [
    'StateStore',
]

logger = logging.getLogger(__name__)


class StateStore:
    """Reads and writes state.json.

    Loading never fails: a missing, unreadable or corrupt file means no
    profile is active.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> State:
        try:
            return State.model_validate_json(self._path.read_bytes())
        except FileNotFoundError:
            return State()
        except (OSError, pydantic.ValidationError) as e:
            logger.debug(f'Treating {self._path} as empty: {e}')
            return State()

    def save(self, state: State) -> None:
        try:
            write_secure(self._path, json.dumps(state.model_dump(exclude_none=True), indent=2) + '\n')
        except OSError as e:
            raise StorageError(f'failed to write state file {self._path}: {e}') from e

    def set_active(self, name: str) -> None:
        self.save(State(active_profile=name))
