from __future__ import annotations

from claude_switch.cli import main

if __name__ == '__main__':
    main()
