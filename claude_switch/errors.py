"""Exception taxonomy for claude-switch.

Every error a user can trigger derives from ClaudeSwitchError. The CLI error
boundary prints the message of these and exits non-zero; anything else is
treated as a crash and gets a traceback.

Recoverable conditions are not exceptions here: a missing or corrupt state
file, a corrupt external config document and keychain failures are handled
where they occur (see repositories/state_store.py, services/config_patcher.py,
clients/keychain.py).
"""

from __future__ import annotations

from enum import StrEnum

__all__ = [
    'ClaudeSwitchError',
    'CorruptCredentialsError',
    'CorruptError',
    'CorruptProfileError',
    'ExecError',
    'InvalidNameError',
    'LoginFailedError',
    'NoCredentialsError',
    'ProfileExistsError',
    'ProfileNotFoundError',
    'ReauthenticationError',
    'RefreshError',
    'RefreshErrorKind',
    'StorageError',
]


class ClaudeSwitchError(Exception):
    """Base class for expected, user-facing failures."""


class InvalidNameError(ClaudeSwitchError):
    """Profile name is empty, '.', '..', or contains a path separator."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"invalid profile name: '{name}'")


class ProfileNotFoundError(ClaudeSwitchError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"profile '{name}' not found")


class ProfileExistsError(ClaudeSwitchError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"profile '{name}' already exists (use 'remove' first)")


class CorruptError(ClaudeSwitchError):
    """A document exists but cannot be parsed into the expected shape."""


class CorruptProfileError(CorruptError):
    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"profile '{name}' is corrupt: {reason}")


class CorruptCredentialsError(CorruptError):
    """Claude Code's stored OAuth credentials do not have the expected fields."""


class NoCredentialsError(ClaudeSwitchError):
    """Neither OAuth credentials nor an API key were found for Claude Code."""


class RefreshErrorKind(StrEnum):
    INVALID_GRANT = 'invalid_grant'
    OTHER = 'other'
    MALFORMED_RESPONSE = 'malformed_response'


class RefreshError(ClaudeSwitchError):
    """OAuth token refresh failed.

    ``INVALID_GRANT`` means the refresh token was revoked or expired and the
    profile needs a fresh interactive login. ``OTHER`` covers HTTP errors and
    network failures; ``status_code`` and ``body`` are set when the server
    answered. ``MALFORMED_RESPONSE`` is a 2xx answer without an access token.
    """

    def __init__(
        self,
        kind: RefreshErrorKind,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    @property
    def is_invalid_grant(self) -> bool:
        return self.kind is RefreshErrorKind.INVALID_GRANT


class LoginFailedError(ClaudeSwitchError):
    """The external ``claude /login`` process did not complete successfully."""

    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        self.returncode = returncode
        super().__init__(message)


class ReauthenticationError(ClaudeSwitchError):
    """Re-authentication finished but did not produce usable OAuth credentials."""


class StorageError(ClaudeSwitchError):
    """An OS-level read or write failed (permissions, disk full, ...)."""


class ExecError(ClaudeSwitchError):
    """Replacing the current process with the requested command failed."""
