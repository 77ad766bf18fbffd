"""Surgical edits to Claude Code's own config documents.

Claude Code owns these files; we own exactly three keys in them:

    <claude_config_dir>/.credentials.json   claudeAiOauth
    ~/.claude.json                          oauthAccount, primaryApiKey

Every write is read-merge-write: load the whole document, change only our
keys, write everything back. Other keys survive byte-for-byte apart from
JSON re-formatting. A document that is missing or unparseable is treated as
empty, so a damaged file can be healed by the next write.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from claude_switch.clients.keychain import Keychain
from claude_switch.errors import StorageError
from claude_switch.schemas.profiles import OAuthAccount, OAuthCredentials
from claude_switch.secure_io import read_json_object, write_json

__all__ = [
    'ACCOUNT_KEY',
    'CREDENTIALS_KEY',
    'ConfigPatcher',
    'PRIMARY_API_KEY_KEY',
]

logger = logging.getLogger(__name__)

CREDENTIALS_KEY = 'claudeAiOauth'
ACCOUNT_KEY = 'oauthAccount'
PRIMARY_API_KEY_KEY = 'primaryApiKey'


class ConfigPatcher:
    def __init__(self, credentials_path: Path, claude_json_path: Path, keychain: Keychain) -> None:
        self._credentials_path = credentials_path
        self._claude_json_path = claude_json_path
        self._keychain = keychain

    # --- Reads ---

    def read_oauth_blob(self) -> dict[str, Any] | None:  # strict_typing_linter.py: loose-typing
        """Claude Code's current OAuth credentials, raw.

        The credentials file wins whenever it has the key. The keychain is
        consulted only when the file is missing, corrupt, or lacks the key.
        """
        document = self._read(self._credentials_path)
        if document is not None:
            blob = document.get(CREDENTIALS_KEY)
            if isinstance(blob, dict):
                return blob
        logger.debug(f'No {CREDENTIALS_KEY} in {self._credentials_path}; trying keychain')
        return self._keychain.read()

    def read_primary_api_key(self) -> str | None:
        document = self._read(self._claude_json_path)
        if document is None:
            return None
        value = document.get(PRIMARY_API_KEY_KEY)
        return value if isinstance(value, str) and value else None

    def read_oauth_account_blob(self) -> dict[str, Any] | None:  # strict_typing_linter.py: loose-typing
        document = self._read(self._claude_json_path)
        if document is None:
            return None
        value = document.get(ACCOUNT_KEY)
        return value if isinstance(value, dict) else None

    # --- Writes ---

    def write_credentials(self, credentials: OAuthCredentials) -> None:
        document = self._read(self._credentials_path) or {}
        document[CREDENTIALS_KEY] = credentials.to_blob()
        self._write(self._credentials_path, document)

    def write_oauth_account(self, account: OAuthAccount) -> None:
        document = self._read(self._claude_json_path) or {}
        document[ACCOUNT_KEY] = account.to_blob()
        self._write(self._claude_json_path, document)

    def clear_owned_keys(self) -> None:
        """Remove our keys so Claude Code falls into its first-run login flow.

        Documents that don't exist are left alone.
        """
        for path, keys in (
            (self._credentials_path, (CREDENTIALS_KEY,)),
            (self._claude_json_path, (ACCOUNT_KEY, PRIMARY_API_KEY_KEY)),
        ):
            if not path.exists():
                continue
            document = self._read(path) or {}
            for key in keys:
                document.pop(key, None)
            self._write(path, document)

    # --- Document I/O ---

    def _read(self, path: Path) -> dict[str, Any] | None:  # strict_typing_linter.py: loose-typing
        try:
            return read_json_object(path)
        except OSError as e:
            raise StorageError(f'failed to read {path}: {e}') from e

    def _write(self, path: Path, document: dict[str, Any]) -> None:  # strict_typing_linter.py: loose-typing
        try:
            write_json(path, document)
        except OSError as e:
            raise StorageError(f'failed to write {path}: {e}') from e
        logger.debug(f'Wrote {path}')
