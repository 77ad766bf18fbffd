"""Persistence for profiles and active-profile state."""

from __future__ import annotations

from claude_switch.repositories.profile_store import ProfileStore, validate_profile_name
from claude_switch.repositories.state_store import StateStore

__all__ = [
    'ProfileStore',
    'StateStore',
    'validate_profile_name',
]
