"""Runs Claude Code's own interactive login.

The login flow is opaque to us: we start ``claude /login`` attached to the
user's terminal, wait for it, and only look at the exit status. Credentials
are picked up afterwards from the files (or keychain) Claude Code wrote.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence

from claude_switch.errors import LoginFailedError

__all__ = [
    'LoginRunner',
]

logger = logging.getLogger(__name__)


class LoginRunner:
    def __init__(self, command: Sequence[str]) -> None:
        self._command = tuple(command)

    @property
    def command(self) -> Sequence[str]:
        return self._command

    def run(self) -> None:
        """Run the login command with inherited stdio. No timeout.

        Raises:
            LoginFailedError: If the command cannot be started or exits non-zero.
        """
        display = shlex.join(self._command)
        logger.debug(f'Running {display}')
        try:
            result = subprocess.run(self._command, check=False)
        except OSError as e:
            raise LoginFailedError(f'could not run {display}: {e}') from e
        if result.returncode != 0:
            raise LoginFailedError(f'{display} exited with status {result.returncode}', returncode=result.returncode)
