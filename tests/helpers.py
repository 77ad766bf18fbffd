"""Fakes and builders shared by the test modules.

Nothing here touches the real home directory, keychain, network or the
``claude`` executable.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import httpx

from claude_switch.clients.login import LoginRunner
from claude_switch.errors import LoginFailedError
from claude_switch.paths import Settings
from claude_switch.schemas.profiles import OAuthCredentials
from claude_switch.services.switcher import Switcher

NOW = 1_700_000_000.0  # Seconds since epoch
NOW_MS = int(NOW * 1000)
HOUR_MS = 3_600_000


def clock() -> float:
    return NOW


class FakeKeychain:
    """In-memory keychain recording writes."""

    def __init__(self, blob: dict[str, Any] | None = None, *, writable: bool = True) -> None:
        self.blob = blob
        self.writable = writable
        self.writes: list[OAuthCredentials] = []

    def read(self) -> dict[str, Any] | None:
        return self.blob

    def write(self, credentials: OAuthCredentials) -> bool:
        self.writes.append(credentials)
        if self.writable:
            self.blob = credentials.to_blob()
        return self.writable


class FakeLoginRunner(LoginRunner):
    """Stands in for ``claude /login``: runs ``action`` (which writes Claude Code's files) or fails."""

    def __init__(self, action: Callable[[], None] | None = None, *, returncode: int = 0) -> None:
        super().__init__(('claude', '/login'))
        self.action = action
        self.returncode = returncode
        self.calls = 0

    def run(self) -> None:
        self.calls += 1
        if self.returncode != 0:
            raise LoginFailedError(f'claude /login exited with status {self.returncode}', returncode=self.returncode)
        if self.action is not None:
            self.action()


class ExecCalled(Exception):
    """Raised by FakeExecvpe in place of replacing the test process."""


class FakeExecvpe:
    """Records the exec call and raises ExecCalled, or ``error`` if one is set."""

    def __init__(self) -> None:
        self.file: str | None = None
        self.argv: list[str] = []
        self.env: dict[str, str] = {}
        self.error: OSError | None = None

    def __call__(self, file: str, argv: Sequence[str], env: Mapping[str, str]) -> object:
        self.file = file
        self.argv = list(argv)
        self.env = dict(env)
        if self.error is not None:
            raise self.error
        raise ExecCalled(file)


class ClaudeCodeFiles:
    """Writes and reads Claude Code's two documents the way Claude Code would."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def login(
        self,
        *,
        access_token: str = 'at-work',
        refresh_token: str = 'rt-work',
        expires_at: int = NOW_MS + HOUR_MS,
        email: str | None = 'me@work.example',
        organization: str | None = 'Work Inc',
        subscription_type: str | None = 'max',
    ) -> None:
        blob: dict[str, Any] = {
            'accessToken': access_token,
            'refreshToken': refresh_token,
            'expiresAt': expires_at,
            'scopes': ['user:inference', 'user:profile'],
        }
        if subscription_type is not None:
            blob['subscriptionType'] = subscription_type
        credentials = self.read_credentials_document() or {}
        credentials['claudeAiOauth'] = blob
        self.write(self.settings.credentials_path, credentials)

        account: dict[str, Any] = {'accountUuid': f'uuid-{access_token}'}
        if email is not None:
            account['emailAddress'] = email
        if organization is not None:
            account['organizationName'] = organization
        claude_json = self.read_claude_json() or {}
        claude_json['oauthAccount'] = account
        self.write(self.settings.claude_json_path, claude_json)

    def login_with_api_key(self, key: str = 'sk-ant-api03-test') -> None:
        claude_json = self.read_claude_json() or {}
        claude_json['primaryApiKey'] = key
        self.write(self.settings.claude_json_path, claude_json)

    def read_credentials_document(self) -> dict[str, Any] | None:
        return self.read(self.settings.credentials_path)

    def read_claude_json(self) -> dict[str, Any] | None:
        return self.read(self.settings.claude_json_path)

    @staticmethod
    def read(path: Path) -> dict[str, Any] | None:
        if not path.exists():
            return None
        data = json.loads(path.read_text())
        assert isinstance(data, dict)
        return data

    @staticmethod
    def write(path: Path, data: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))


type TokenHandler = Callable[[httpx.Request], httpx.Response]


def token_response(
    access_token: str = 'at-new',
    refresh_token: str | None = None,
    expires_in: float | None = 3600,
) -> Callable[[httpx.Request], httpx.Response]:
    body: dict[str, Any] = {'access_token': access_token, 'token_type': 'Bearer'}
    if refresh_token is not None:
        body['refresh_token'] = refresh_token
    if expires_in is not None:
        body['expires_in'] = expires_in
    return lambda request: httpx.Response(200, json=body)


def unreachable_token_endpoint(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f'unexpected token refresh: {request.url}')


type SwitcherFactory = Callable[..., Switcher]
