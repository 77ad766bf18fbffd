"""Shared fixtures: an isolated home directory and a Switcher wired to fakes.

A Switcher is assembled from real stores and a real ConfigPatcher over
``tmp_path``, a TokenRefresher on httpx.MockTransport, and fakes for the
keychain, the login flow and ``execvpe``.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Mapping
from pathlib import Path

import httpx
import pytest
import rich.console

from claude_switch.clients.login import LoginRunner
from claude_switch.clients.oauth import TokenRefresher
from claude_switch.paths import Settings
from claude_switch.repositories.profile_store import ProfileStore
from claude_switch.repositories.state_store import StateStore
from claude_switch.services.config_patcher import ConfigPatcher
from claude_switch.services.switcher import Switcher

from tests.helpers import (
    ClaudeCodeFiles,
    FakeExecvpe,
    FakeKeychain,
    FakeLoginRunner,
    SwitcherFactory,
    TokenHandler,
    clock,
    unreachable_token_endpoint,
)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings.from_env(environ={'USER': 'tester'}, home=tmp_path)


@pytest.fixture
def state_store(settings: Settings) -> StateStore:
    return StateStore(settings.state_path)


@pytest.fixture
def profile_store(settings: Settings, state_store: StateStore) -> ProfileStore:
    return ProfileStore(settings.profiles_dir, state_store)


@pytest.fixture
def keychain() -> FakeKeychain:
    return FakeKeychain()


@pytest.fixture
def patcher(settings: Settings, keychain: FakeKeychain) -> ConfigPatcher:
    return ConfigPatcher(settings.credentials_path, settings.claude_json_path, keychain)


@pytest.fixture
def claude_files(settings: Settings) -> ClaudeCodeFiles:
    return ClaudeCodeFiles(settings)


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def console(output: io.StringIO) -> rich.console.Console:
    return rich.console.Console(file=output, width=200, color_system=None)


@pytest.fixture
def execvpe() -> FakeExecvpe:
    return FakeExecvpe()


@pytest.fixture
def make_switcher(
    profile_store: ProfileStore,
    state_store: StateStore,
    patcher: ConfigPatcher,
    keychain: FakeKeychain,
    console: rich.console.Console,
    execvpe: FakeExecvpe,
) -> SwitcherFactory:
    """Build a Switcher; pass ``token_handler`` and ``login`` to script the outside world."""

    def factory(
        *,
        token_handler: TokenHandler = unreachable_token_endpoint,
        login: LoginRunner | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> Switcher:
        return Switcher(
            profiles=profile_store,
            state=state_store,
            patcher=patcher,
            keychain=keychain,
            refresher=TokenRefresher(5.0, transport=httpx.MockTransport(token_handler), clock=clock),
            login=login or FakeLoginRunner(),
            console=console,
            execvpe=execvpe,
            environ=environ if environ is not None else {'PATH': '/usr/bin', 'HOME': '/home/tester'},
            clock=clock,
        )

    return factory
