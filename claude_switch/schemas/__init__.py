"""Pydantic schemas for claude-switch."""

from __future__ import annotations

from claude_switch.schemas.base import ClaudeCodeModel, StrictModel
from claude_switch.schemas.profiles import (
    ApiKeyProfile,
    OAuthAccount,
    OAuthCredentials,
    OAuthProfile,
    Profile,
    profile_adapter,
)
from claude_switch.schemas.state import State

__all__ = [
    'ApiKeyProfile',
    'ClaudeCodeModel',
    'OAuthAccount',
    'OAuthCredentials',
    'OAuthProfile',
    'Profile',
    'State',
    'StrictModel',
    'profile_adapter',
]
