"""Profile switch, import, add, exec and re-authentication flows.

A switch to an OAuth profile walks this state machine::

    Loaded -> Fresh ---------------------------------------------> Applied
           -> Expired -> Refreshing -> Refreshed ------------------> Applied
                                    -> GrantRevoked -> Reauthenticating
                                                    -> Reauthenticated -> Applied
                                    -> RefreshFailed (abort)

Write order when applying is fixed: profile file, Claude Code credentials,
keychain (best-effort), Claude Code account, and the active-profile state
last. A crash part-way leaves the profile file correct and merely fails to
record it as active; the next successful switch fixes that.

API key profiles never touch Claude Code's files (the CLI has no file-based
API key injection); switching to one only records it as active.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import NoReturn

import pydantic
import rich.console

from claude_switch.clients.keychain import Keychain, keychain_for_platform
from claude_switch.clients.login import LoginRunner
from claude_switch.clients.oauth import TokenRefresher, is_expired, now_ms
from claude_switch.errors import (
    ClaudeSwitchError,
    CorruptCredentialsError,
    ExecError,
    LoginFailedError,
    NoCredentialsError,
    ProfileExistsError,
    ReauthenticationError,
    RefreshError,
)
from claude_switch.paths import Settings
from claude_switch.repositories.profile_store import ProfileStore
from claude_switch.repositories.state_store import StateStore
from claude_switch.schemas.profiles import ApiKeyProfile, OAuthAccount, OAuthCredentials, OAuthProfile, Profile
from claude_switch.services.config_patcher import ConfigPatcher

__all__ = [
    'API_KEY_ENV',
    'OAUTH_TOKEN_ENV',
    'ProfileRow',
    'SwitchOutcome',
    'SwitchResult',
    'Switcher',
    'build_switcher',
]

logger = logging.getLogger(__name__)

OAUTH_TOKEN_ENV = 'CLAUDE_CODE_OAUTH_TOKEN'
API_KEY_ENV = 'ANTHROPIC_API_KEY'

type Execvpe = Callable[[str, Sequence[str], Mapping[str, str]], object]


class SwitchOutcome(StrEnum):
    FRESH = 'fresh'
    REFRESHED = 'refreshed'
    REAUTHENTICATED = 'reauthenticated'
    API_KEY = 'api_key'


@dataclass(frozen=True)
class SwitchResult:
    name: str
    profile: Profile
    outcome: SwitchOutcome


@dataclass(frozen=True)
class ProfileRow:
    """One entry of ``list``: a loaded profile, or why it could not be loaded."""

    name: str
    active: bool
    profile: Profile | None = None
    error: ClaudeSwitchError | None = None


class Switcher:
    """Composes the stores and clients into the user-facing operations.

    Progress messages meant for the user ("Token expired, refreshing...") go
    to ``console``; diagnostics go to logging.
    """

    def __init__(
        self,
        *,
        profiles: ProfileStore,
        state: StateStore,
        patcher: ConfigPatcher,
        keychain: Keychain,
        refresher: TokenRefresher,
        login: LoginRunner,
        console: rich.console.Console,
        execvpe: Execvpe = os.execvpe,
        environ: Mapping[str, str] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._profiles = profiles
        self._state = state
        self._patcher = patcher
        self._keychain = keychain
        self._refresher = refresher
        self._login = login
        self._console = console
        self._execvpe = execvpe
        self._environ = environ
        self._clock = clock

    @property
    def profiles(self) -> ProfileStore:
        return self._profiles

    @property
    def state(self) -> StateStore:
        return self._state

    # --- Creating profiles ---

    def import_profile(self, name: str, label: str | None = None) -> Profile:
        """Save whatever Claude Code is currently logged in with as ``name``."""
        self._ensure_new(name)
        profile = self.capture_current(label=label)
        self._profiles.save(name, profile)
        self._state.set_active(name)
        logger.info(f'Imported {profile.display_type} profile {name!r}')
        return profile

    def add(self, name: str, label: str | None = None) -> Profile:
        """Log out of Claude Code, run its login flow, and save the result as ``name``."""
        self._ensure_new(name)
        if self._state.load().active_profile is None:
            self._say("Warning: the current Claude Code session is not saved as a profile (see 'import').")

        self._patcher.clear_owned_keys()
        try:
            self._login.run()
        except LoginFailedError as e:
            raise LoginFailedError(
                f"{e}; use 'claude-switch use <profile>' to restore your previous session",
                returncode=e.returncode,
            ) from e

        try:
            profile = self.capture_current(label=label)
        except NoCredentialsError as e:
            raise NoCredentialsError('no credentials found after login; did auth complete?') from e
        self._profiles.save(name, profile)
        self._state.set_active(name)
        return profile

    def capture_current(self, label: str | None = None) -> Profile:
        """Snapshot Claude Code's active credentials.

        OAuth credentials (credentials file, then keychain) take precedence
        over a legacy ``primaryApiKey``. The account blob and the API key
        come from two independent reads of ~/.claude.json.

        Raises:
            CorruptCredentialsError: The OAuth blob lacks required fields.
            NoCredentialsError: Claude Code is not logged in.
        """
        blob = self._patcher.read_oauth_blob()
        if blob is not None:
            try:
                credentials = OAuthCredentials.model_validate(blob)
            except pydantic.ValidationError as e:
                raise CorruptCredentialsError(f'failed to parse OAuth credentials: {e}') from e
            return OAuthProfile(credentials=credentials, account=self._capture_account(), label=label)

        api_key = self._patcher.read_primary_api_key()
        if api_key is not None:
            return ApiKeyProfile(api_key=api_key, label=label)

        raise NoCredentialsError('no credentials found; is Claude Code logged in?')

    def _capture_account(self) -> OAuthAccount:
        blob = self._patcher.read_oauth_account_blob()
        if blob is None:
            return OAuthAccount()
        try:
            return OAuthAccount.model_validate(blob)
        except pydantic.ValidationError as e:
            logger.warning(f'Ignoring unparseable oauthAccount: {e}')
            return OAuthAccount()

    def _ensure_new(self, name: str) -> None:
        if self._profiles.exists(name):
            raise ProfileExistsError(name)

    # --- Switching ---

    def use(self, name: str) -> SwitchResult:
        """Make ``name`` Claude Code's active login, refreshing tokens if needed."""
        profile = self._profiles.load(name)

        if isinstance(profile, ApiKeyProfile):
            self._state.set_active(name)
            return SwitchResult(name, profile, SwitchOutcome.API_KEY)

        fresh, outcome = self._ensure_fresh(name, profile)
        self._apply(fresh)
        self._state.set_active(name)
        logger.info(f'Switched to {name!r} ({outcome})')
        return SwitchResult(name, fresh, outcome)

    def resolve(self, name: str) -> Profile:
        """Load ``name`` with usable credentials, without touching Claude Code's files.

        Refreshed or re-authenticated credentials are persisted to the profile.
        """
        profile = self._profiles.load(name)
        if isinstance(profile, ApiKeyProfile):
            return profile
        fresh, _ = self._ensure_fresh(name, profile)
        return fresh

    def _ensure_fresh(self, name: str, profile: OAuthProfile) -> tuple[OAuthProfile, SwitchOutcome]:
        if not is_expired(profile.credentials, now_ms(self._clock)):
            return profile, SwitchOutcome.FRESH

        self._say('Token expired, refreshing...')
        try:
            credentials = self._refresher.refresh(profile.credentials)
        except RefreshError as e:
            if not e.is_invalid_grant:
                raise
            return self._reauthenticate(name, profile), SwitchOutcome.REAUTHENTICATED

        refreshed = profile.model_copy(update={'credentials': credentials})
        self._profiles.save(name, refreshed)
        return refreshed, SwitchOutcome.REFRESHED

    def _reauthenticate(self, name: str, previous: OAuthProfile) -> OAuthProfile:
        """Revoked refresh token: run a fresh login and overwrite the stored profile."""
        self._say(f"Refresh token expired for profile '{name}'. Please re-authenticate...")

        self._patcher.clear_owned_keys()
        try:
            self._login.run()
        except LoginFailedError as e:
            raise LoginFailedError(
                f"re-authentication failed: {e}; use 'claude-switch use <profile>' to switch to another profile",
                returncode=e.returncode,
            ) from e

        try:
            profile = self.capture_current(label=previous.label)
        except NoCredentialsError as e:
            raise NoCredentialsError('no credentials found after login; did auth complete?') from e
        if not isinstance(profile, OAuthProfile):
            raise ReauthenticationError(
                f"re-authentication of '{name}' produced an API key login, not OAuth; profile left unchanged"
            )

        self._profiles.save(name, profile)
        self._say(f"Profile '{name}' re-authenticated ({profile.display_email})")
        return profile

    def _apply(self, profile: OAuthProfile) -> None:
        self._patcher.write_credentials(profile.credentials)
        if not self._keychain.write(profile.credentials):
            logger.debug('Keychain not updated')
        self._patcher.write_oauth_account(profile.account)

    # --- Exec ---

    def exec(self, name: str, argv: Sequence[str]) -> NoReturn:
        """Replace this process with ``argv``, credentials injected via one env var."""
        if not argv:
            raise ExecError('no command specified')

        profile = self.resolve(name)
        if isinstance(profile, OAuthProfile):
            var, value = OAUTH_TOKEN_ENV, profile.credentials.access_token
        else:
            var, value = API_KEY_ENV, profile.api_key

        env = dict(os.environ if self._environ is None else self._environ)
        env[var] = value
        logger.debug(f'exec {argv[0]} with {var} from profile {name!r}')
        try:
            self._execvpe(argv[0], list(argv), env)
        except OSError as e:
            raise ExecError(f'exec failed: {argv[0]}: {e}') from e
        raise ExecError(f'exec of {argv[0]} returned unexpectedly')

    # --- Listing / removal ---

    def remove(self, name: str) -> None:
        self._profiles.remove(name)

    def list_profiles(self) -> Sequence[ProfileRow]:
        active = self._state.load().active_profile
        rows: list[ProfileRow] = []
        for name in self._profiles.list():
            try:
                rows.append(ProfileRow(name, name == active, profile=self._profiles.load(name)))
            except ClaudeSwitchError as e:
                rows.append(ProfileRow(name, name == active, error=e))
        return rows

    def _say(self, message: str) -> None:
        self._console.print(message, markup=False, highlight=False)


def build_switcher(settings: Settings, *, console: rich.console.Console) -> Switcher:
    """Wire up all components from resolved settings."""
    state = StateStore(settings.state_path)
    keychain = keychain_for_platform(settings)
    return Switcher(
        profiles=ProfileStore(settings.profiles_dir, state),
        state=state,
        patcher=ConfigPatcher(settings.credentials_path, settings.claude_json_path, keychain),
        keychain=keychain,
        refresher=TokenRefresher(settings.refresh_timeout),
        login=LoginRunner(settings.login_command),
        console=console,
    )
