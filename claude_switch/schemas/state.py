"""Active-profile state schema."""

from __future__ import annotations

from claude_switch.schemas.base import StrictModel

__all__ = [
    'State',
]


class State(StrictModel):
    """Which profile claude-switch last applied.

    May name a profile that no longer exists if the profile file was deleted
    behind our back; ProfileStore.remove clears it for removals it performs.
    """

    active_profile: str | None = None
