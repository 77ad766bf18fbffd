"""Profile persistence: one JSON file per named profile.

Layout: ``<profiles_dir>/<name>.json``. The name is the only key, so it must
map to exactly one plain file name inside the profiles directory.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

import pydantic

from claude_switch.errors import CorruptProfileError, InvalidNameError, ProfileNotFoundError, StorageError
from claude_switch.repositories.state_store import StateStore
from claude_switch.schemas.profiles import Profile, profile_adapter
from claude_switch.schemas.state import State
from claude_switch.secure_io import write_secure

__all__ = [
    'PROFILE_SUFFIX',
    'ProfileStore',
    'validate_profile_name',
]

logger = logging.getLogger(__name__)

PROFILE_SUFFIX = '.json'

_SEPARATORS = frozenset({'/', '\\', os.sep, '\0'} | ({os.altsep} if os.altsep else set()))


def validate_profile_name(name: str) -> None:
    """Reject names that are empty, '.', '..', or contain a path separator.

    Raises:
        InvalidNameError: If the name could escape or alias the profiles directory.
    """
    if not name or name in ('.', '..') or any(sep in name for sep in _SEPARATORS):
        raise InvalidNameError(name)


class ProfileStore:
    """CRUD over profile files.

    Removing the active profile also clears the active reference in the
    StateStore, the one place these two stores interact.
    """

    def __init__(self, profiles_dir: Path, state_store: StateStore) -> None:
        self._dir = profiles_dir
        self._state = state_store

    @property
    def profiles_dir(self) -> Path:
        return self._dir

    def path_for(self, name: str) -> Path:
        validate_profile_name(name)
        return self._dir / f'{name}{PROFILE_SUFFIX}'

    def exists(self, name: str) -> bool:
        """True if a file exists for the name, whether or not it parses."""
        return self.path_for(name).is_file()

    def save(self, name: str, profile: Profile) -> Path:
        path = self.path_for(name)
        exclude = {'label'} if profile.label is None else None
        content = profile.model_dump_json(indent=2, by_alias=True, exclude=exclude) + '\n'
        try:
            write_secure(path, content)
        except OSError as e:
            raise StorageError(f"failed to save profile '{name}': {e}") from e
        logger.debug(f'Saved profile {name!r} to {path}')
        return path

    def load(self, name: str) -> Profile:
        path = self.path_for(name)
        try:
            raw = path.read_bytes()
        except FileNotFoundError as e:
            raise ProfileNotFoundError(name) from e
        except IsADirectoryError as e:
            raise CorruptProfileError(name, f'{path} is a directory') from e
        except OSError as e:
            raise StorageError(f"failed to read profile '{name}': {e}") from e
        try:
            return profile_adapter.validate_json(raw)
        except pydantic.ValidationError as e:
            raise CorruptProfileError(name, _summarize(e)) from e

    def list(self) -> Sequence[str]:
        """Names of all stored profiles, sorted. Missing directory means none."""
        if not self._dir.is_dir():
            return []
        names: list[str] = []
        for path in self._dir.glob(f'*{PROFILE_SUFFIX}'):
            if not path.is_file():
                continue
            name = path.name.removesuffix(PROFILE_SUFFIX)
            try:
                validate_profile_name(name)
            except InvalidNameError:
                continue
            names.append(name)
        return sorted(names)

    def remove(self, name: str) -> None:
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise ProfileNotFoundError(name) from e
        except OSError as e:
            raise StorageError(f"failed to remove profile '{name}': {e}") from e

        state = self._state.load()
        if state.active_profile == name:
            self._state.save(State())
            logger.info(f'Cleared active profile {name!r}')


def _summarize(error: pydantic.ValidationError) -> str:
    """First validation error as a one-line message."""
    first = error.errors()[0]
    location = '.'.join(str(part) for part in first['loc'])
    return f'{location}: {first["msg"]}' if location else first['msg']
