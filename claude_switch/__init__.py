"""Manage multiple Claude Code accounts and switch between them without re-authenticating."""

from __future__ import annotations

__version__ = '0.1.0'
