"""Owner-only file writes and tolerant JSON document reads."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

__all__ = [
    'read_json_object',
    'write_json',
    'write_secure',
]

logger = logging.getLogger(__name__)

SECURE_FILE_MODE = 0o600


def write_secure(path: Path, content: str) -> None:
    """Write content to a temp file (0600), fsync, then rename over path.

    Parent directories are created. Readers never see a half-written file,
    but there is no locking: a concurrent writer's update can be lost.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f'{path.name}.tmp')
    try:
        fd = os.open(str(tmp), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SECURE_FILE_MODE)
        try:
            pending = memoryview(content.encode())
            while pending:  # os.write may be partial
                pending = pending[os.write(fd, pending) :]
            os.fsync(fd)
        finally:
            os.close(fd)
        os.chmod(tmp, SECURE_FILE_MODE)  # O_CREAT mode is ignored if tmp already existed
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def write_json(path: Path, data: Any) -> None:  # strict_typing_linter.py: loose-typing
    """Pretty-print data as JSON (2-space indent, trailing newline) and write it securely."""
    write_secure(path, json.dumps(data, indent=2) + '\n')


def read_json_object(path: Path) -> dict[str, Any] | None:  # strict_typing_linter.py: loose-typing
    """Read a JSON document whose top level must be an object.

    Returns None if the file is missing, not valid JSON, or not an object.
    Used for documents where "corrupt" and "absent" are handled the same way.
    Other OS errors (permissions, I/O) propagate.
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return None
    try:
        data = json.loads(raw)
    except ValueError as e:  # JSONDecodeError, UnicodeDecodeError
        logger.warning(f'Ignoring unparseable JSON in {path}: {e}')
        return None
    if not isinstance(data, dict):
        logger.warning(f'Ignoring {path}: top-level value is {type(data).__name__}, not an object')
        return None
    return data
