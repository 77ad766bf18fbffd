"""Platform credential store adapter.

Claude Code on macOS keeps its OAuth credentials in the login keychain rather
than in ~/.claude/.credentials.json:

    service "Claude Code-credentials", account $USER
    password = JSON document {"claudeAiOauth": {...}, "mcpOAuth": {...}}

The keychain is secondary: reads are a fallback when the credentials file has
nothing, writes are best-effort. Neither ever raises. Other platforms get
NullKeychain.
"""

from __future__ import annotations

import json
import logging
import subprocess
import sys
from collections.abc import Sequence
from typing import Any, Protocol

from claude_switch.paths import Settings
from claude_switch.schemas.profiles import OAuthCredentials

__all__ = [
    'KEYCHAIN_SERVICE_CREDENTIALS',
    'Keychain',
    'MacOSKeychain',
    'NullKeychain',
    'keychain_for_platform',
]

logger = logging.getLogger(__name__)

KEYCHAIN_SERVICE_CREDENTIALS = 'Claude Code-credentials'
OAUTH_KEY = 'claudeAiOauth'
SECURITY_TIMEOUT = 5  # Seconds


class Keychain(Protocol):
    def read(self) -> dict[str, Any] | None:  # strict_typing_linter.py: loose-typing
        """Return the raw claudeAiOauth blob, or None on any failure."""
        ...

    def write(self, credentials: OAuthCredentials) -> bool:
        """Upsert credentials. Returns False on failure instead of raising."""
        ...


class NullKeychain:
    """Platforms without a supported credential store."""

    def read(self) -> dict[str, Any] | None:  # strict_typing_linter.py: loose-typing
        return None

    def write(self, credentials: OAuthCredentials) -> bool:
        return False


class MacOSKeychain:
    """Login keychain access through the ``security`` command-line tool."""

    def __init__(self, account: str, service: str = KEYCHAIN_SERVICE_CREDENTIALS) -> None:
        self._account = account
        self._service = service

    def read(self) -> dict[str, Any] | None:  # strict_typing_linter.py: loose-typing
        document = self._read_document()
        if document is None:
            return None
        blob = document.get(OAUTH_KEY)
        if not isinstance(blob, dict):
            return None
        return blob

    def write(self, credentials: OAuthCredentials) -> bool:
        if not self._account:
            logger.warning('USER is not set; skipping keychain update')
            return False

        # Keep sibling entries (MCP server tokens) that Claude Code stores alongside
        document = self._read_document() or {}
        document[OAUTH_KEY] = credentials.to_blob()

        result = self._security(
            ['add-generic-password', '-U', '-s', self._service, '-a', self._account, '-w', json.dumps(document)]
        )
        if result is None or result.returncode != 0:
            stderr = result.stderr.strip() if result is not None else 'security tool unavailable'
            logger.warning(f'Keychain update failed: {stderr}')
            return False
        return True

    def _read_document(self) -> dict[str, Any] | None:  # strict_typing_linter.py: loose-typing
        if not self._account:
            return None
        result = self._security(['find-generic-password', '-s', self._service, '-a', self._account, '-w'])
        if result is None or result.returncode != 0:
            return None
        try:
            document = json.loads(result.stdout.strip())
        except json.JSONDecodeError as e:
            logger.debug(f'Keychain entry is not JSON: {e}')
            return None
        if not isinstance(document, dict):
            return None
        return document

    def _security(self, args: Sequence[str]) -> subprocess.CompletedProcess[str] | None:
        try:
            return subprocess.run(
                ['security', *args],
                capture_output=True,
                text=True,
                timeout=SECURITY_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f'security {args[0]} failed: {e}')
            return None


def keychain_for_platform(settings: Settings) -> Keychain:
    """Pick the credential store for this platform. Called once at startup."""
    if sys.platform == 'darwin':
        return MacOSKeychain(settings.keychain_account)
    return NullKeychain()
