"""Services: config patching and the switch/import/exec flows."""

from __future__ import annotations

from claude_switch.services.config_patcher import ConfigPatcher
from claude_switch.services.switcher import ProfileRow, SwitchOutcome, Switcher, SwitchResult, build_switcher

__all__ = [
    'ConfigPatcher',
    'ProfileRow',
    'SwitchOutcome',
    'SwitchResult',
    'Switcher',
    'build_switcher',
]
