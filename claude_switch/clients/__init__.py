"""Clients for things outside our own files: keychain, token endpoint, Claude CLI."""

from __future__ import annotations

from claude_switch.clients.keychain import Keychain, MacOSKeychain, NullKeychain, keychain_for_platform
from claude_switch.clients.login import LoginRunner
from claude_switch.clients.oauth import TokenRefresher, is_expired

__all__ = [
    'Keychain',
    'LoginRunner',
    'MacOSKeychain',
    'NullKeychain',
    'TokenRefresher',
    'is_expired',
    'keychain_for_platform',
]
