"""Centralized file paths and settings.

All on-disk locations are resolved once, at startup, from the environment and
the home directory. The resulting Settings object is passed to every
component; nothing below the CLI reads the environment.

    $XDG_CONFIG_HOME/claude-switch/        (default ~/.config/claude-switch)
        profiles/<name>.json               One profile per file (0600)
        state.json                         {"active_profile": "<name>"}
    $CLAUDE_CONFIG_DIR/.credentials.json   (default ~/.claude) Claude Code credentials
    ~/.claude.json                         Claude Code general config
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from claude_switch.schemas.base import StrictModel

__all__ = [
    'APP_DIR_NAME',
    'CLAUDE_JSON_NAME',
    'CREDENTIALS_FILE_NAME',
    'DEFAULT_REFRESH_TIMEOUT',
    'Settings',
]

APP_DIR_NAME = 'claude-switch'
CREDENTIALS_FILE_NAME = '.credentials.json'
CLAUDE_JSON_NAME = '.claude.json'

# Seconds. The token endpoint is called at most once per invocation, no retries.
DEFAULT_REFRESH_TIMEOUT = 30.0


class Settings(StrictModel):
    """Resolved locations and knobs for one invocation."""

    config_dir: Path
    claude_config_dir: Path
    home_dir: Path
    keychain_account: str
    login_command: tuple[str, ...]
    refresh_timeout: float = DEFAULT_REFRESH_TIMEOUT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, home: Path | None = None) -> Settings:
        """Resolve settings from environment variables.

        Empty variables count as unset.
        """
        env = os.environ if environ is None else environ
        home_dir = home if home is not None else Path.home()

        xdg = env.get('XDG_CONFIG_HOME')
        config_base = Path(xdg) if xdg else home_dir / '.config'

        claude_dir = env.get('CLAUDE_CONFIG_DIR')
        claude_config_dir = Path(claude_dir) if claude_dir else home_dir / '.claude'

        claude_bin = env.get('CLAUDE_SWITCH_CLAUDE_BIN') or 'claude'

        return cls(
            config_dir=config_base / APP_DIR_NAME,
            claude_config_dir=claude_config_dir,
            home_dir=home_dir,
            keychain_account=env.get('USER', ''),
            login_command=(claude_bin, '/login'),
        )

    @property
    def profiles_dir(self) -> Path:
        return self.config_dir / 'profiles'

    @property
    def state_path(self) -> Path:
        return self.config_dir / 'state.json'

    @property
    def credentials_path(self) -> Path:
        return self.claude_config_dir / CREDENTIALS_FILE_NAME

    @property
    def claude_json_path(self) -> Path:
        # Lives in the home directory even when CLAUDE_CONFIG_DIR is set
        return self.home_dir / CLAUDE_JSON_NAME
